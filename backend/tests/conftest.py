# tests/conftest.py

import os
import tempfile
from decimal import Decimal

# Must be set before careernest modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "careernest-test-logs"))
os.environ["MOMO_MODE"] = "mock"
os.environ["SEED_AI_SERVICES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from careernest.database import Base, get_db, init_db
from careernest.gateway import get_gateway_client
from careernest.gateway.mock import MockMomoClient
from careernest.main import app
from careernest.models import MentorshipSession, User
from careernest.services.mentor_payment_service import MentorPaymentService
from careernest.utils.dates import utcnow
from careernest.utils.rate_limiter import reset_rate_limits

REJECTED_PHONE = "27000000001"


# ---------------------------
# Database + gateway
# ---------------------------

@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture()
def gateway() -> MockMomoClient:
    return MockMomoClient(reject_payers=[REJECTED_PHONE])


@pytest.fixture()
def service(db, gateway) -> MentorPaymentService:
    return MentorPaymentService(db, gateway)


@pytest.fixture()
def client(db, gateway) -> TestClient:
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_gateway_client] = lambda: gateway
    reset_rate_limits()
    # Needed so tests can assert 500s instead of pytest re-raising server exceptions
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# ---------------------------
# Record helpers
# ---------------------------

@pytest.fixture()
def mentor(db) -> User:
    user = User(username="thandi", phone="27820000001", role="mentor")
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def mentee(db) -> User:
    user = User(username="sipho", phone="27820000002", role="client")
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def make_session(db, mentor, mentee):
    def _make(
        rate="500.00",
        scheduled_at=None,
        status="completed",
        payment_status="pending",
        session_type="career_guidance",
        mentor_id=None,
        client_id=None,
    ) -> MentorshipSession:
        s = MentorshipSession(
            mentor_id=mentor_id or mentor.id,
            client_id=client_id or mentee.id,
            session_type=session_type,
            duration=60,
            rate=Decimal(rate),
            scheduled_at=scheduled_at or utcnow(),
            status=status,
            payment_status=payment_status,
        )
        db.add(s)
        db.commit()
        return s

    return _make
