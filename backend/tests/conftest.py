from __future__ import annotations

import fakeredis
import pytest

from tripwage.db.redis_client import RedisDatabase
from tripwage.db.session import SqlDatabase
from tripwage.storage.selector import document_backend, sql_backend


@pytest.fixture
def sql_db(tmp_path):
    db = SqlDatabase(f"sqlite+pysqlite:///{tmp_path / 'tripwage.db'}")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def redis_db():
    return RedisDatabase(fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True), prefix="test")


@pytest.fixture
def backend_a(redis_db):
    return document_backend(redis_db)


@pytest.fixture
def backend_b(sql_db):
    return sql_backend(sql_db)


@pytest.fixture(params=["A", "B"])
def backend(request):
    return request.getfixturevalue(f"backend_{request.param.lower()}")
