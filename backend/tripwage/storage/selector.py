from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from tripwage.core.config import Settings
from tripwage.core.errors import BackendUnavailableError
from tripwage.db.redis_client import RedisDatabase
from tripwage.db.session import SqlDatabase
from tripwage.storage.base import OrderStore, UserStore, WorkTimeStore
from tripwage.storage.document import RedisOrderStore, RedisUserStore, RedisWorkTimeStore
from tripwage.storage.mirror import DualOrderStore, DualUserStore, DualWorkTimeStore, Mirror
from tripwage.storage.sql import SqlOrderStore, SqlUserStore, SqlWorkTimeStore


logger = logging.getLogger(__name__)


@dataclass
class Backend:
    name: str
    orders: OrderStore
    work_times: WorkTimeStore
    users: UserStore
    start: Callable[[], None]
    close: Callable[[], None]


@dataclass
class Storage:
    """The stores the rest of the app talks to, plus their lifecycle."""

    orders: OrderStore
    work_times: WorkTimeStore
    users: UserStore
    mode: str
    read_primary: str
    backends: list[Backend] = field(default_factory=list)

    def close(self) -> None:
        for backend in self.backends:
            try:
                backend.close()
            except Exception as exc:
                logger.warning("closing backend %s failed: %s", backend.name, exc)


def document_backend(db: RedisDatabase) -> Backend:
    return Backend(
        name="A",
        orders=RedisOrderStore(db),
        work_times=RedisWorkTimeStore(db),
        users=RedisUserStore(db),
        start=db.ping,
        close=db.close,
    )


def sql_backend(db: SqlDatabase, *, create_tables: bool = True) -> Backend:
    def start() -> None:
        db.ping()
        if create_tables:
            db.create_all()

    return Backend(
        name="B",
        orders=SqlOrderStore(db),
        work_times=SqlWorkTimeStore(db),
        users=SqlUserStore(db),
        start=start,
        close=db.dispose,
    )


def default_factories(settings: Settings) -> dict[str, Callable[[], Backend]]:
    return {
        "A": lambda: document_backend(RedisDatabase.from_url(settings.redis_url, prefix=settings.redis_prefix)),
        "B": lambda: sql_backend(SqlDatabase(settings.database_url), create_tables=settings.auto_create_tables),
    }


def _open(name: str, factory: Callable[[], Backend]) -> tuple[Backend | None, bool]:
    try:
        backend = factory()
    except Exception as exc:
        logger.error("backend %s could not be configured: %s", name, exc)
        return None, False
    try:
        backend.start()
    except Exception as exc:
        logger.error("backend %s is unreachable: %s", name, exc)
        return backend, False
    return backend, True


def _single(backend: Backend) -> Storage:
    logger.info("storage: single backend %s", backend.name)
    return Storage(
        orders=backend.orders,
        work_times=backend.work_times,
        users=backend.users,
        mode=backend.name,
        read_primary=backend.name,
        backends=[backend],
    )


def _dual(primary: Backend, secondary: Backend) -> Storage:
    logger.info("storage: dual-write, reads from %s, mirrors to %s", primary.name, secondary.name)
    names = {"primary_name": primary.name, "secondary_name": secondary.name}
    return Storage(
        orders=DualOrderStore(Mirror(primary.orders, secondary.orders, **names)),
        work_times=DualWorkTimeStore(Mirror(primary.work_times, secondary.work_times, **names)),
        users=DualUserStore(Mirror(primary.users, secondary.users, **names)),
        mode="dual",
        read_primary=primary.name,
        backends=[primary, secondary],
    )


def build_storage(
    settings: Settings,
    factories: Mapping[str, Callable[[], Backend]] | None = None,
) -> Storage:
    """Open the configured backend(s) once at process start.

    Single mode fails if its backend is down. Dual mode fails only when both
    are down; a dead read-primary drops to the other backend alone, a dead
    secondary stays attached and its writes are skipped.
    """
    factories = factories or default_factories(settings)
    selection = settings.backend_selection

    if selection in ("A", "B"):
        backend, reachable = _open(selection, factories[selection])
        if backend is None or not reachable:
            if backend is not None:
                backend.close()
            raise BackendUnavailableError(f"Storage backend {selection} is unavailable")
        return _single(backend)

    primary_name = settings.read_primary
    secondary_name = "A" if primary_name == "B" else "B"
    primary, primary_ok = _open(primary_name, factories[primary_name])
    secondary, secondary_ok = _open(secondary_name, factories[secondary_name])

    if not primary_ok and not secondary_ok:
        for backend in (primary, secondary):
            if backend is not None:
                backend.close()
        raise BackendUnavailableError("No storage backend is available for dual-write mode")

    if not primary_ok:
        logger.error(
            "read-primary %s is unavailable; running on backend %s alone",
            primary_name,
            secondary_name,
        )
        if primary is not None:
            primary.close()
        return _single(secondary)

    if secondary is None:
        logger.error("secondary %s could not be configured; running on backend %s alone", secondary_name, primary_name)
        return _single(primary)

    if not secondary_ok:
        logger.warning("secondary %s is unreachable; mirrored writes will be skipped until it returns", secondary_name)
    return _dual(primary, secondary)
