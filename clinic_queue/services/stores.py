import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_queue.core.exceptions import ConstraintViolation, NotFound
from clinic_queue.models.doctor_model import Doctor
from clinic_queue.models.patient_model import Patient

logger = logging.getLogger(__name__)

PATIENT_MUTABLE_FIELDS = {
    "full_name", "phone", "scheduled_time", "estimated_time", "status",
    "delay_minutes", "notes", "notification_sent", "notification_sent_at",
    "notification_message",
}

DOCTOR_MUTABLE_FIELDS = {"full_name", "address", "postal_code", "city", "specialties"}


class PatientStore:
    """Patient records of one database session, always scoped by doctor."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: Dict[str, Any]) -> Patient:
        patient = Patient(**{k: v for k, v in data.items() if k in Patient.__table__.columns})
        try:
            self.db.add(patient)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ConstraintViolation(f"Could not save patient {data.get('full_name')!r}: {e}") from e
        self.db.refresh(patient)
        return patient

    def find(
        self,
        doctor_id: UUID,
        status: Optional[str] = None,
        notification_sent: Optional[bool] = None,
    ) -> List[Patient]:
        query = self.db.query(Patient).filter(Patient.doctor_id == doctor_id)
        if status is not None:
            query = query.filter(Patient.status == status)
        if notification_sent is not None:
            query = query.filter(Patient.notification_sent == notification_sent)
        return query.order_by(Patient.scheduled_time.asc(), Patient.created_at.asc()).all()

    def get(self, patient_id: UUID, doctor_id: UUID) -> Patient:
        patient = (
            self.db.query(Patient)
            .filter(Patient.patient_id == patient_id, Patient.doctor_id == doctor_id)
            .first()
        )
        if not patient:
            raise NotFound("Patient not found")
        return patient

    def update(self, patient_id: UUID, doctor_id: UUID, patch: Dict[str, Any]) -> Patient:
        patient = self.get(patient_id, doctor_id)
        for key, value in patch.items():
            if key in PATIENT_MUTABLE_FIELDS:
                setattr(patient, key, value)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ConstraintViolation(f"Could not update patient {patient_id}: {e}") from e
        self.db.refresh(patient)
        return patient

    def delete(self, patient_id: UUID, doctor_id: UUID) -> None:
        patient = self.get(patient_id, doctor_id)
        self.db.delete(patient)
        self.db.commit()


class DoctorDirectory:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, doctor_id: UUID) -> Doctor:
        doctor = self.db.query(Doctor).filter(Doctor.doctor_id == doctor_id).first()
        if not doctor:
            raise NotFound("Doctor not found")
        return doctor

    def find_by_email(self, email: str) -> Optional[Doctor]:
        return self.db.query(Doctor).filter(Doctor.email == email.strip().lower()).first()

    def create(self, **fields) -> Doctor:
        doctor = Doctor(**fields)
        try:
            self.db.add(doctor)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ConstraintViolation(f"Could not create doctor: {e}") from e
        self.db.refresh(doctor)
        return doctor

    def update(self, doctor_id: UUID, patch: Dict[str, Any]) -> Doctor:
        doctor = self.find_by_id(doctor_id)
        for key, value in patch.items():
            if key in DOCTOR_MUTABLE_FIELDS:
                setattr(doctor, key, value)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ConstraintViolation(f"Could not update doctor {doctor_id}: {e}") from e
        self.db.refresh(doctor)
        return doctor

    def touch_login(self, doctor: Doctor) -> Doctor:
        doctor.last_login = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(doctor)
        return doctor

    def increment_sms_count(self, doctor_id: UUID, count: int = 1) -> None:
        if count <= 0:
            return
        doctor = self.find_by_id(doctor_id)
        doctor.sms_sent_count = (doctor.sms_sent_count or 0) + count
        self.db.commit()
