"""Pytest configuration and fixtures."""

import os
import uuid
from pathlib import Path

# must be set before app.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./ledgerbook-test.db")
os.environ.setdefault("DB_MANAGE", "migrations")
os.environ.setdefault("ENV", "local")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.base import Base
from app.core.config import settings
import app.modules.codes.models  # noqa: F401
import app.modules.clients.models  # noqa: F401
import app.modules.addresses.models  # noqa: F401
import app.modules.commands.models  # noqa: F401
from app.modules.codes.models import Code, CodeValue
from app.modules.clients.models import Client

ORG_ID = uuid.UUID(settings.DEFAULT_ORG_ID)

LOOKUPS = {
    settings.STATE_CODE_NAME: ["Texas", "Ontario"],
    settings.COUNTRY_CODE_NAME: ["USA", "Canada"],
    settings.ADDRESS_TYPE_CODE_NAME: ["Home", "Office"],
}


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _seed(session: Session) -> dict:
    """Create the lookup codes, their values and one client; returns ids by label."""
    ids: dict = {}
    for code_name, labels in LOOKUPS.items():
        code = Code(org_id=ORG_ID, name=code_name, system_defined=True)
        session.add(code)
        session.flush()
        ids[code_name] = code.id
        for position, label in enumerate(labels):
            value = CodeValue(org_id=ORG_ID, code_id=code.id, label=label, position=position)
            session.add(value)
            session.flush()
            ids[label] = value.id
    client = Client(org_id=ORG_ID, display_name="Jane Doe", external_id="C-001")
    session.add(client)
    session.flush()
    ids["client"] = client.id
    session.commit()
    return ids


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "ledgerbook.db"


@pytest.fixture
def seeded(db_path: Path) -> dict:
    """Create the schema and lookups with a plain sync engine."""
    engine = create_engine(f"sqlite:///{db_path}")
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        ids = _seed(session)
    engine.dispose()
    return ids


@pytest.fixture
def async_engine(db_path: Path, seeded: dict):
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    return engine


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(async_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
def org_id() -> uuid.UUID:
    return ORG_ID
