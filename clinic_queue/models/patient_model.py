# clinic_queue/models/patient_model.py
import enum
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.sql import func

from clinic_queue.core.database import Base


class PatientStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DELAYED = "delayed"
    DONE = "done"


class Patient(Base):
    __tablename__ = "patient"

    patient_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=False)
    scheduled_time = Column(String(64), nullable=False)
    estimated_time = Column(String(64), nullable=False)

    doctor_id = Column(Uuid(as_uuid=True), ForeignKey("doctor.doctor_id", ondelete="CASCADE"), nullable=False)
    doctor_name = Column(String(255), nullable=False)

    source_file_name = Column(Text)
    imported_at = Column(DateTime(timezone=True))

    status = Column(String(16), nullable=False, default=PatientStatus.PENDING.value)
    notification_sent = Column(Boolean, nullable=False, default=False)
    notification_sent_at = Column(DateTime(timezone=True))
    notification_message = Column(Text)
    delay_minutes = Column(Integer, nullable=False, default=0)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'in_progress', 'delayed', 'done')",
            name="valid_patient_status",
        ),
        CheckConstraint("delay_minutes >= 0", name="non_negative_delay"),
        Index("ix_patient_doctor_schedule", "doctor_id", "scheduled_time"),
        Index("ix_patient_status", "status"),
    )
