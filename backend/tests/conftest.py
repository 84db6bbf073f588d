"""Pytest configuration and shared fixtures for SealFlow tests.

Provides:
- In-memory SQLite database, recreated for every test
- A fixed, adjustable clock so that timestamps and numbers are predictable
- Workflow services for both application kinds
- FastAPI TestClient with database, clock and file store overridden
"""

import os
import tempfile
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Generator

# Settings are read at import time, so configure them before importing sealflow
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENV"] = "test"
os.environ["LOG_JSON"] = "false"
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="sealflow-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sealflow.database import enable_case_sensitive_like, get_db as database_get_db
from sealflow.dependencies import get_clock
from sealflow.files.router import get_file_store
from sealflow.files.storage import LocalFileStore
from sealflow.models import Base, Seal
from sealflow.seals.service import SealService
from sealflow.workflow.kinds import CREATION, USAGE
from sealflow.workflow.service import ApplicationWorkflow


# Single shared in-memory connection so every session sees the same tables
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_case_sensitive_like(test_engine)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=test_engine,
)

DEFAULT_NOW = datetime(2024, 3, 15, 10, 0, 0)


class FixedClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime = DEFAULT_NOW):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def usage_workflow(db_session: Session, clock: FixedClock) -> ApplicationWorkflow:
    return ApplicationWorkflow(db_session, USAGE, clock)


@pytest.fixture
def creation_workflow(db_session: Session, clock: FixedClock) -> ApplicationWorkflow:
    return ApplicationWorkflow(db_session, CREATION, clock)


@pytest.fixture
def usage_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for a valid usage application body (model attribute names)."""

    def build(**overrides) -> Dict[str, Any]:
        data = {
            "seal_name": "公司公章",
            "seal_type": "OFFICIAL",
            "applicant": "zhangsan",
            "department": "财务部",
            "purpose": "合同盖章",
            "expected_time": datetime(2024, 3, 16, 9, 0, 0),
        }
        data.update(overrides)
        return data

    return build


@pytest.fixture
def creation_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for a valid creation application body (model attribute names)."""

    def build(**overrides) -> Dict[str, Any]:
        data = {
            "seal_name": "华东分公司合同章",
            "seal_type": "CONTRACT",
            "seal_shape": "ROUND",
            "owner_department": "华东分公司",
            "keeper_department": "行政部",
            "keeper": "wangwu",
            "applicant": "lisi",
            "applicant_department": "行政部",
        }
        data.update(overrides)
        return data

    return build


@pytest.fixture
def official_seal(db_session: Session, clock: FixedClock) -> Seal:
    """A registered OFFICIAL seal kept by wangwu."""
    return SealService(db_session, clock).create_seal({
        "name": "公司公章",
        "type": "OFFICIAL",
        "shape": "ROUND",
        "owner_department": "总经办",
        "keeper_department": "行政部",
        "keeper": "wangwu",
        "keeper_phone": "13800000000",
        "location": "行政部保险柜",
    })


@pytest.fixture
def upload_root(tmp_path) -> str:
    return str(tmp_path / "uploads")


@pytest.fixture(scope="function")
def client(db_session: Session, clock: FixedClock, upload_root: str):
    """FastAPI TestClient bound to the test database, clock and file store."""
    from sealflow.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[database_get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_file_store] = lambda: LocalFileStore(upload_root, clock)

    yield TestClient(app)

    app.dependency_overrides.clear()
