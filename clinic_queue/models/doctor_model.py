# clinic_queue/models/doctor_model.py
import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Uuid
from sqlalchemy.sql import func

from clinic_queue.core.database import Base


class Doctor(Base):
    __tablename__ = "doctor"

    doctor_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)

    address = Column(String(255), default="")
    postal_code = Column(String(32), default="")
    city = Column(String(128), default="")
    specialties = Column(JSON, default=list)

    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True))
    sms_sent_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
