import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from clinic_queue.core.exceptions import (
    ClinicQueueError,
    EmptyBatch,
    NoRecordsPersisted,
    ValidationError,
)
from clinic_queue.models.doctor_model import Doctor
from clinic_queue.models.file_import import FileImport
from clinic_queue.models.patient_model import Patient, PatientStatus
from clinic_queue.models.processing_log import ProcessingLog
from clinic_queue.schemas.patient import PatientCreate, PatientUpdate
from clinic_queue.services import exporter, file_parser, notifier
from clinic_queue.services.bulk_persist import persist_batch
from clinic_queue.services.normalizer import normalize_row
from clinic_queue.services.stores import DoctorDirectory, PatientStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("full_name", "phone")


@dataclass
class ImportResult:
    file_import: FileImport
    saved: List[Patient] = field(default_factory=list)


def _clean_payload(data: Dict) -> Dict:
    cleaned = {}
    for key, value in data.items():
        if isinstance(value, PatientStatus):
            value = value.value
        elif isinstance(value, str):
            value = value.strip()
        cleaned[key] = value
    return cleaned


def create_patient(db: Session, payload: PatientCreate, doctor_id: UUID) -> Patient:
    doctor = DoctorDirectory(db).find_by_id(doctor_id)
    data = _clean_payload(payload.model_dump())

    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    data["scheduled_time"] = data.get("scheduled_time") or datetime.now(timezone.utc).isoformat()
    data["estimated_time"] = data.get("estimated_time") or data["scheduled_time"]
    data["doctor_id"] = doctor.doctor_id
    data["doctor_name"] = doctor.full_name

    patient = PatientStore(db).create(data)
    logger.info("Patient %s created for doctor %s", patient.patient_id, doctor_id)
    return patient


def list_patients(
    db: Session,
    doctor_id: UUID,
    status: Optional[PatientStatus] = None,
    notification_sent: Optional[bool] = None,
) -> List[Patient]:
    return PatientStore(db).find(
        doctor_id,
        status=status.value if status else None,
        notification_sent=notification_sent,
    )


def get_patient(db: Session, patient_id: UUID, doctor_id: UUID) -> Patient:
    return PatientStore(db).get(patient_id, doctor_id)


def update_patient(db: Session, patient_id: UUID, doctor_id: UUID, payload: PatientUpdate) -> Patient:
    patch = _clean_payload(payload.model_dump(exclude_unset=True))
    patch = {k: v for k, v in patch.items() if v is not None or k == "notes"}
    for name in REQUIRED_FIELDS:
        if name in patch and not patch[name]:
            raise ValidationError(f"Field '{name}' cannot be empty")
    return PatientStore(db).update(patient_id, doctor_id, patch)


def delete_patient(db: Session, patient_id: UUID, doctor_id: UUID) -> None:
    PatientStore(db).delete(patient_id, doctor_id)


def patient_stats(db: Session, doctor_id: UUID) -> Dict[str, int]:
    patients = PatientStore(db).find(doctor_id)
    stats = {"total": len(patients)}
    for status in PatientStatus:
        stats[status.value] = sum(1 for p in patients if p.status == status.value)
    stats["notification_sent"] = sum(1 for p in patients if p.notification_sent)
    return stats


def _log_row(db: Session, file_import: FileImport, row_number: int, stage: str, message: str) -> None:
    db.add(ProcessingLog(import_id=file_import.import_id, row_number=row_number, stage=stage, message=message))


def _finish_import(db: Session, file_import: FileImport, status: str, error: Optional[str] = None) -> None:
    file_import.processing_status = status
    file_import.error_message = error
    db.commit()


def import_from_file(db: Session, file_path: str, doctor_id: UUID, file_name: str) -> ImportResult:
    """
    Parse, normalize and save every patient of an uploaded CSV/Excel file.

    Rows without a name or phone are skipped, rows the store refuses are
    skipped too; both are written to the import's processing log. Failures to
    read the file, or an import with nothing saved, abort with an error after
    the audit record is updated.
    """
    doctor: Doctor = DoctorDirectory(db).find_by_id(doctor_id)
    ext = os.path.splitext(file_name)[1].lower()
    rows = file_parser.iter_rows(file_path, ext)

    file_import = FileImport(
        doctor_id=doctor.doctor_id,
        filename=file_name,
        file_extension=ext.lstrip("."),
        processing_status="Uploaded",
    )
    db.add(file_import)
    db.commit()

    now = datetime.now(timezone.utc)
    candidates = []
    candidate_rows = []
    extracted = 0
    try:
        for row_number, row in enumerate(rows, start=1):
            extracted += 1
            candidate = normalize_row(row, doctor.doctor_id, doctor.full_name, file_name, now=now)
            if candidate is None:
                logger.warning("Row %d skipped: missing name or phone", row_number)
                _log_row(db, file_import, row_number, "normalize", "missing name or phone")
                continue
            candidates.append(candidate)
            candidate_rows.append(row_number)
    except ClinicQueueError as e:
        file_import.records_extracted_from_file = extracted
        _finish_import(db, file_import, "Failed", e.message)
        raise

    file_import.records_extracted_from_file = extracted
    file_import.records_parsed = len(candidates)
    db.commit()
    logger.info("%d patients parsed from %s", len(candidates), file_name)

    try:
        batch = persist_batch(PatientStore(db), candidates)
    except EmptyBatch as e:
        _finish_import(db, file_import, "Failed", e.message)
        raise
    except NoRecordsPersisted as e:
        for failure in e.failures:
            _log_row(db, file_import, candidate_rows[failure.index], "persist", failure.error)
        file_import.records_failed_to_insert_count = len(e.failures)
        _finish_import(db, file_import, "Failed", e.message)
        raise

    for failure in batch.failures:
        _log_row(db, file_import, candidate_rows[failure.index], "persist", failure.error)
    file_import.records_inserted_count = batch.succeeded
    file_import.records_failed_to_insert_count = len(batch.failures)
    _finish_import(db, file_import, "Success" if not batch.failures else "Partial")

    logger.info("%d patients imported from %s", batch.succeeded, file_name)
    return ImportResult(file_import=file_import, saved=batch.saved)


def export_csv(db: Session, doctor_id: UUID) -> str:
    return exporter.export_csv(PatientStore(db), doctor_id)


def export_excel(db: Session, doctor_id: UUID) -> bytes:
    return exporter.export_excel(PatientStore(db), doctor_id)


def send_sms(db: Session, dispatcher, patient_id: UUID, doctor_id: UUID, message: str) -> Patient:
    message = (message or "").strip()
    if not message:
        raise ValidationError("Message cannot be empty")

    store = PatientStore(db)
    patient = store.get(patient_id, doctor_id)
    dispatcher.send(patient.phone, message)
    patient = notifier.mark_notified(store, patient, doctor_id, message)
    DoctorDirectory(db).increment_sms_count(doctor_id)
    logger.info("SMS sent to patient %s", patient.patient_id)
    return patient


def send_bulk_delay_sms(db: Session, dispatcher, doctor_id: UUID) -> notifier.BulkNotifyResult:
    DoctorDirectory(db).find_by_id(doctor_id)
    result = notifier.notify_delays(PatientStore(db), dispatcher, doctor_id)
    DoctorDirectory(db).increment_sms_count(doctor_id, result.sent_count)
    return result
