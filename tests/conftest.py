import os
import secrets
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Point the application at the test database before it is imported.
SQLALCHEMY_TEST_URL = "sqlite+pysqlite:///./test_civic_triage.db"
os.environ.setdefault("DATABASE_URL", SQLALCHEMY_TEST_URL)
os.environ.setdefault("LOG_FILE", "")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from civic_triage.main import app  # type: ignore
from civic_triage.database import Base  # type: ignore
from civic_triage.api import deps  # type: ignore
"""Pytest fixtures and factories.

All model modules are imported before Base.metadata.create_all() so the
Report <-> Admin relationships are configured.
"""
from civic_triage.models.db import Admin, Report, ReportEngagement
from civic_triage.models.db.enums import AdminRole, PriorityLevel

engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def create_test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    try:
        os.remove("test_civic_triage.db")
    except OSError:
        pass

@pytest.fixture()
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture(autouse=True)
def _isolate_tables(create_test_db):  # type: ignore[unused-argument]
    """Empty every table after each test; proximity counts depend on it."""
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())

# Override dependency
def _override_get_db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

app.dependency_overrides[deps.get_db] = _override_get_db

@pytest.fixture()
def client():
    return TestClient(app)

# ---------- Data factory helpers ----------

@pytest.fixture()
def admin_factory(db_session):
    def _create(
        role: AdminRole | str = AdminRole.VIEWER,
        department: str | None = "Roads",
        *,
        is_active: bool = True,
        created_at: datetime | None = None,
        email: str | None = None,
    ) -> Admin:
        role_value = role.value if isinstance(role, AdminRole) else role
        admin = Admin(
            email=email or f"{role_value}_{secrets.token_hex(4)}@city.gov",
            full_name=f"{role_value.title()} {secrets.token_hex(2)}",
            role=role_value,
            department=department,
            is_active=is_active,
        )
        if created_at is not None:
            admin.created_at = created_at
        db_session.add(admin)
        db_session.commit()
        db_session.refresh(admin)
        return admin
    return _create

@pytest.fixture()
def report_factory(db_session):
    def _create(
        *,
        title: str = "Pothole on the main road",
        description: str = "Deep pothole near the bus stop causing traffic slowdowns.",
        category: str = "Roads & Infrastructure",
        department: str = "Roads",
        latitude: float | None = 12.9716,
        longitude: float | None = 77.5946,
        priority: PriorityLevel = PriorityLevel.MEDIUM,
        is_resolved: bool = False,
        created_at: datetime | None = None,
        engagement: dict | None = None,
        user_id: int = 1,
        resolved_at: datetime | None = None,
    ) -> Report:
        report = Report(
            user_id=user_id,
            title=title,
            description=description,
            category=category,
            department=department,
            latitude=latitude,
            longitude=longitude,
            priority=priority,
            is_resolved=is_resolved,
            resolved_at=resolved_at,
        )
        if created_at is not None:
            report.created_at = created_at
        if engagement is not None:
            report.engagement = ReportEngagement(**engagement)
        db_session.add(report)
        db_session.commit()
        db_session.refresh(report)
        return report
    return _create

@pytest.fixture()
def now() -> datetime:
    return datetime.now(timezone.utc)

@pytest.fixture()
def hours_ago(now):
    def _at(hours: float) -> datetime:
        return now - timedelta(hours=hours)
    return _at
