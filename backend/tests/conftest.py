import os
import tempfile
from pathlib import Path

# Settings are read at import time; point them at throwaway resources first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_INIT_MODE", "create_all")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FILE", str(Path(tempfile.gettempdir()) / "fieldreport-tests" / "app.log"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fieldreport.core.database import Base, get_db, enable_sqlite_foreign_keys
from fieldreport.core.security import create_access_token, get_password_hash
from fieldreport.main import app
from fieldreport.models import User, SUBMISSION_MODELS
from fieldreport.services.rate_limiter import rate_limiter

PASSWORD = "Secret123"


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()
    rate_limiter.reset()


@pytest.fixture()
def make_user(db_session):
    def _make_user(email, role="user", password=PASSWORD, force_reset=False, created_by=None):
        user = User(
            email=email,
            password_hash=get_password_hash(password),
            role=role,
            force_password_reset=force_reset,
            created_by=created_by,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def ceo(make_user):
    return make_user("ceo@example.com", role="ceo")


@pytest.fixture()
def admin(make_user, ceo):
    return make_user("admin@example.com", role="admin", created_by=ceo.id)


@pytest.fixture()
def field_user(make_user, admin):
    return make_user("field@example.com", role="user", created_by=admin.id)


@pytest.fixture()
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": str(user.id), "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def add_submission(db_session):
    """Insert a report row directly, optionally back-dated."""

    def _add(user, type_="depo", area="North", submitted_at=None, **values):
        defaults = {
            "depo": {"person_met": "Ravi", "competition_activity": "Discounts"},
            "vendor": {"vendor_name": "Kumar", "phone": "9876543210"},
            "dealer": {"dealer_name": "Sharma Agencies", "competition_newspapers": []},
            "stall": {"stall_owner": "Mohan", "competition_newspapers": []},
            "reader": {"reader_name": "Anita", "contact_details": "anita@example.com", "present_reading": []},
            "ooh": {"segment": "Hotels", "contact_person": "Manager", "existing_newspaper": []},
        }[type_]
        defaults.update(values)
        record = SUBMISSION_MODELS[type_](user_id=user.id, area=area, **defaults)
        if submitted_at is not None:
            record.submitted_at = submitted_at
        db_session.add(record)
        db_session.commit()
        db_session.refresh(record)
        return record

    return _add

