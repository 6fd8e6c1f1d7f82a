from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

import tripwage.models  # noqa: F401
from tripwage.models.base import Base


class SqlDatabase:
    """Engine and session factory for backend B.

    Built once at startup and disposed at shutdown; stores receive it
    explicitly instead of reaching for a module-level engine.
    """

    def __init__(self, url: str, *, echo: bool = False):
        self.url = url
        self.engine = create_engine(url, pool_pre_ping=True, echo=echo)
        self._session_maker = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self._session_maker()
        try:
            yield db
        finally:
            db.close()

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
