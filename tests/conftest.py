import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
for key in ("MAIL_USERNAME", "MAIL_PASSWORD", "MAIL_FROM", "MAIL_SERVER"):
    os.environ.pop(key, None)

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.database import Base, get_db
from main import app
from model.leave_model import Leave, LeaveStatus, LeaveType
from model.usermodels import Role, User
from service.notification_service import get_notifier
from utils.date_utils import inclusive_days
from utils.token import create_access_token, hash_password


class RecordingNotifier:
    """Stands in for LeaveNotifier and keeps every message instead of mailing it."""

    is_available = True

    def __init__(self):
        self.sent = []

    async def send_leave_notification(self, mode, leave, employee_name, employee_email, summary=None):
        self.sent.append({"kind": "leave", "mode": mode, "leave": leave, "email": employee_email})

    async def send_otp(self, email, code):
        self.sent.append({"kind": "otp", "email": email, "code": code})

    async def send_welcome(self, email, name, temp_password):
        self.sent.append({"kind": "welcome", "email": email, "password": temp_password})


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db_session, notifier):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make_user(email, role=Role.EMPLOYEE, name=None, password="password123", user_id=None, end_date=None):
        user = User(
            id=user_id,
            name=name or email.split("@")[0].title(),
            email=email,
            password=hash_password(password),
            role=role,
            end_date=end_date,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_leave(db_session):
    def _make_leave(user, start, end, type=LeaveType.FULL, status=LeaveStatus.APPROVED, reason="Family trip"):
        leave = Leave(
            user_id=user.id,
            start_date=start,
            end_date=end,
            type=type,
            status=status,
            reason=reason,
            days=inclusive_days(start, end),
        )
        db_session.add(leave)
        db_session.commit()
        db_session.refresh(leave)
        return leave
    return _make_leave


@pytest.fixture
def employee(make_user):
    return make_user("alice@example.com", name="Alice")


@pytest.fixture
def manager(make_user):
    return make_user("boss@example.com", role=Role.MANAGER, name="Boss")


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


@pytest.fixture
def employee_headers(employee):
    return auth_headers(employee)


@pytest.fixture
def manager_headers(manager):
    return auth_headers(manager)


@pytest.fixture
def june_leave(employee, make_leave):
    return make_leave(employee, date(2025, 6, 10), date(2025, 6, 15))


@pytest.fixture
def headers_for():
    return auth_headers
