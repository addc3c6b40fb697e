from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic_queue.core import config
from clinic_queue.core.database import Base, get_db
from clinic_queue.core.exceptions import ConstraintViolation, DispatchError, NotFound
from clinic_queue.core.security import create_access_token, hash_password
from clinic_queue.main import app
from clinic_queue.services.messaging import get_dispatcher
from clinic_queue.services.stores import DoctorDirectory


class InMemoryPatientStore:
    """Record store kept in a list; names in ``fail_on`` are refused on create."""

    def __init__(self, fail_on=()):
        self.records = []
        self.fail_on = set(fail_on)

    def create(self, data):
        if data["full_name"] in self.fail_on:
            raise ConstraintViolation(f"duplicate patient {data['full_name']}")
        record = SimpleNamespace(
            patient_id=uuid4(),
            notes=None,
            status="pending",
            notification_sent=False,
            notification_sent_at=None,
            notification_message=None,
            delay_minutes=0,
        )
        for key, value in data.items():
            setattr(record, key, value)
        self.records.append(record)
        return record

    def find(self, doctor_id, status=None, notification_sent=None):
        found = [
            r for r in self.records
            if r.doctor_id == doctor_id
            and (status is None or r.status == status)
            and (notification_sent is None or r.notification_sent == notification_sent)
        ]
        return sorted(found, key=lambda r: r.scheduled_time)

    def update(self, patient_id, doctor_id, patch):
        for record in self.records:
            if record.patient_id == patient_id and record.doctor_id == doctor_id:
                for key, value in patch.items():
                    setattr(record, key, value)
                return record
        raise NotFound("Patient not found")


class StubDispatcher:
    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send(self, phone, message):
        if phone in self.fail_for:
            raise DispatchError(f"carrier rejected {phone}")
        self.sent.append((phone, message))


def make_record(store, doctor_id, full_name, phone, scheduled_time, **extra):
    data = {
        "full_name": full_name,
        "phone": phone,
        "scheduled_time": scheduled_time,
        "estimated_time": scheduled_time,
        "doctor_id": doctor_id,
        "doctor_name": "Dr. House",
        "source_file_name": None,
        "imported_at": datetime.now(timezone.utc),
    }
    data.update(extra)
    return store.create(data)


@pytest.fixture
def memory_store():
    return InMemoryPatientStore()


@pytest.fixture
def dispatcher():
    return StubDispatcher()


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
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
def doctor(db):
    return DoctorDirectory(db).create(
        full_name="Dr. House",
        email="house@clinic.test",
        password_hash=hash_password("secret123"),
    )


@pytest.fixture
def auth_headers(doctor):
    return {"Authorization": f"Bearer {create_access_token(doctor)}"}


@pytest.fixture
def client(session_factory, dispatcher, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path / "uploads"))

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()
