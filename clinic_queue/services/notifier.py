import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from clinic_queue.core.exceptions import ClinicQueueError
from clinic_queue.models.patient_model import PatientStatus

logger = logging.getLogger(__name__)


@dataclass
class NotificationDetail:
    patient_id: UUID
    full_name: str
    success: bool
    error: Optional[str] = None


@dataclass
class BulkNotifyResult:
    total_candidates: int = 0
    sent_count: int = 0
    details: List[NotificationDetail] = field(default_factory=list)


def delay_message(patient) -> str:
    message = f"Your appointment scheduled at {patient.scheduled_time} is delayed."
    if patient.delay_minutes:
        message += f" Expected delay: {patient.delay_minutes} minutes."
    return message


def mark_notified(store, patient, doctor_id: UUID, message: str, now: Optional[datetime] = None):
    return store.update(
        patient.patient_id,
        doctor_id,
        {
            "notification_sent": True,
            "notification_sent_at": now or datetime.now(timezone.utc),
            "notification_message": message,
        },
    )


def notify_one(store, dispatcher, patient, doctor_id: UUID, now=None) -> NotificationDetail:
    message = delay_message(patient)
    try:
        dispatcher.send(patient.phone, message)
        mark_notified(store, patient, doctor_id, message, now)
    except ClinicQueueError as e:
        return NotificationDetail(patient.patient_id, patient.full_name, success=False, error=e.message)
    except Exception as e:
        logger.exception("Unexpected failure notifying patient %s", patient.patient_id)
        return NotificationDetail(patient.patient_id, patient.full_name, success=False, error=str(e))
    return NotificationDetail(patient.patient_id, patient.full_name, success=True)


def notify_delays(store, dispatcher, doctor_id: UUID, now: Optional[datetime] = None) -> BulkNotifyResult:
    """Send a delay SMS to every pending patient of the doctor not yet notified."""
    candidates = store.find(doctor_id, status=PatientStatus.PENDING.value, notification_sent=False)
    result = BulkNotifyResult(total_candidates=len(candidates))

    for patient in candidates:
        detail = notify_one(store, dispatcher, patient, doctor_id, now)
        result.details.append(detail)
        if detail.success:
            result.sent_count += 1
        else:
            logger.error("Delay SMS to %s failed: %s", patient.full_name, detail.error)

    logger.info("Delay SMS sent: %d/%d for doctor %s", result.sent_count, result.total_candidates, doctor_id)
    return result
