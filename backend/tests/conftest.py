import os

# Must be set before gradebook.database is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SEED_ON_STARTUP"] = "0"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gradebook.database import Base, get_db, utc_now_iso
from gradebook.main import app
from gradebook.models import Account, StudentProfile, ScoreEntry, AcademicYear
from gradebook.security import get_password_hash


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_account(db, username, role="student", password="secret", full_name=None,
                 is_super_admin=False, is_verified=True, is_active=True):
    now = utc_now_iso()
    account = Account(
        username=username,
        password_hash=get_password_hash(password),
        full_name=full_name or username.title(),
        role=role,
        is_super_admin=is_super_admin,
        is_verified=is_verified,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )
    db.add(account)
    db.commit()
    return account


def make_student(db, username, class_name="10A1", code=None, full_name=None,
                 academic_year="2024-2025"):
    account = make_account(db, username, role="student", full_name=full_name)
    profile = StudentProfile(
        account_id=account.id,
        student_code=code or "HS-" + username,
        class_name=class_name,
        grade=class_name[:2],
        academic_year=academic_year,
    )
    db.add(profile)
    db.commit()
    return profile


def add_score(db, student, subject, weighted_avg, subject_weight=1.0, semester=1,
              academic_year="2024-2025"):
    entry = ScoreEntry(
        student_id=student.id,
        subject_name=subject,
        subject_weight=subject_weight,
        final_score=weighted_avg,
        weighted_avg=weighted_avg,
        semester=semester,
        academic_year=academic_year,
        entered_by="tester",
        entered_at=utc_now_iso(),
    )
    db.add(entry)
    db.commit()
    return entry


def make_year(db, name, is_current=False):
    start = name.split("-")[0]
    year = AcademicYear(name=name, start_date=f"{start}-09-05",
                        end_date=f"{int(start) + 1}-05-31", is_current=is_current)
    db.add(year)
    db.commit()
    return year


def on_next_flush(db, action):
    """Run `action` once, just before `db` next writes to the store."""
    event.listen(db, "before_flush", lambda session, flush_context, instances: action(), once=True)
