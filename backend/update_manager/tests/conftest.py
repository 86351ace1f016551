"""Test configuration and fixtures."""

import os
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

TEST_AGENT_KEY = "agent-test-key-0123456789"
TEST_DASHBOARD_KEY = "dashboard-test-key-0123456789"

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["TESTING"] = "true"
os.environ["DEVICE_AGENT_API_KEY"] = TEST_AGENT_KEY
os.environ["DASHBOARD_API_KEY"] = TEST_DASHBOARD_KEY

from update_manager.core.config import Settings, get_settings  # noqa: E402
from update_manager.core.time import utcnow  # noqa: E402
from update_manager.db import Base, get_db  # noqa: E402
from update_manager.db.models import Device, DeviceTask, Organisation  # noqa: E402
from update_manager.domain.devices import device_key  # noqa: E402
from update_manager.main import app  # noqa: E402 - must set env vars before importing

# Use in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_settings():
    """Per-test settings; tests may mutate fields such as the organisation policy."""
    return Settings(
        database_url=SQLALCHEMY_DATABASE_URL,
        testing=True,
        device_agent_api_key=TEST_AGENT_KEY,
        dashboard_api_key=TEST_DASHBOARD_KEY,
    )


@pytest.fixture
def override_dependencies(db_session, test_settings):
    """Point the app at the test session and settings."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_dependencies):
    """Create a test client with overridden database and settings dependencies."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def lenient_client(override_dependencies):
    """Test client that returns unhandled errors as 500 responses instead of raising."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def agent_headers():
    return {"Authorization": f"Bearer {TEST_AGENT_KEY}"}


@pytest.fixture
def dashboard_headers():
    return {"Authorization": f"Bearer {TEST_DASHBOARD_KEY}"}


@pytest.fixture
def test_organisation(db_session):
    organisation = Organisation(name="Acme Clinics", tenant_id=7)
    db_session.add(organisation)
    db_session.commit()
    db_session.refresh(organisation)
    return organisation


@pytest.fixture
def test_device(db_session):
    """A device that has reported once and was seen just now."""
    device = Device(
        device_key=device_key(1, None, "WS-EXISTING"),
        hostname="WS-EXISTING",
        os_name="Windows",
        os_version="10.0.19045",
        last_seen=utcnow(),
        compliance_status="compliant",
        pending_critical_count=0,
        pending_total_count=0,
        failed_updates_count=0,
        tenant_id=1,
    )
    db_session.add(device)
    db_session.commit()
    db_session.refresh(device)
    return device


@pytest.fixture
def pending_tasks(db_session, test_device):
    """Three pending tasks with strictly increasing creation times."""
    base = utcnow() - timedelta(minutes=10)
    tasks = []
    for index, task_type in enumerate(["scan", "install_updates", "reboot"]):
        task = DeviceTask(
            device_id=test_device.id,
            task_type=task_type,
            status="pending",
            created_at=base + timedelta(seconds=index),
        )
        db_session.add(task)
        tasks.append(task)
    db_session.commit()
    for task in tasks:
        db_session.refresh(task)
    return tasks
