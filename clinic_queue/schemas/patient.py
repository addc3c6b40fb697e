from datetime import datetime
from typing import Optional, List
from uuid import UUID as PyUUID

from pydantic import BaseModel, ConfigDict, Field

from clinic_queue.models.patient_model import PatientStatus


class PatientCreate(BaseModel):
    full_name: str
    phone: str
    scheduled_time: Optional[str] = None
    estimated_time: Optional[str] = None
    status: PatientStatus = PatientStatus.PENDING
    delay_minutes: int = Field(default=0, ge=0)
    notes: Optional[str] = None


class PatientUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    scheduled_time: Optional[str] = None
    estimated_time: Optional[str] = None
    status: Optional[PatientStatus] = None
    delay_minutes: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class PatientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    patient_id: PyUUID
    full_name: str
    phone: str
    scheduled_time: str
    estimated_time: str
    doctor_id: PyUUID
    doctor_name: str
    source_file_name: Optional[str] = None
    imported_at: Optional[datetime] = None
    status: PatientStatus
    notification_sent: bool
    notification_sent_at: Optional[datetime] = None
    notification_message: Optional[str] = None
    delay_minutes: int
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PatientStats(BaseModel):
    total: int
    pending: int
    in_progress: int
    delayed: int
    done: int
    notification_sent: int


class SmsRequest(BaseModel):
    message: str


class NotificationDetailRead(BaseModel):
    patient_id: PyUUID
    full_name: str
    success: bool
    error: Optional[str] = None


class BulkNotifyRead(BaseModel):
    total_candidates: int
    sent_count: int
    details: List[NotificationDetailRead]
