from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic_queue.core.database import get_db
from clinic_queue.core.exceptions import NotFound
from clinic_queue.core.security import get_current_doctor
from clinic_queue.models.doctor_model import Doctor
from clinic_queue.models.file_import import FileImport
from clinic_queue.models.patient_model import Patient
from clinic_queue.models.processing_log import ProcessingLog
from clinic_queue.schemas.processing_log import ProcessingLogRead

router = APIRouter()


@router.get("/imports/{import_id}")
def get_import_report(import_id: UUID, db: Session = Depends(get_db), doctor: Doctor = Depends(get_current_doctor)):
    file_import = (
        db.query(FileImport)
        .filter(FileImport.import_id == import_id, FileImport.doctor_id == doctor.doctor_id)
        .first()
    )
    if not file_import:
        raise NotFound("Import not found")

    total_records = file_import.records_extracted_from_file or 0
    parsed = file_import.records_parsed or 0
    inserted = file_import.records_inserted_count or 0
    failed = file_import.records_failed_to_insert_count or 0

    log_entries = (
        db.query(ProcessingLog)
        .filter(ProcessingLog.import_id == import_id)
        .order_by(ProcessingLog.row_number)
        .all()
    )
    rejected_rows = sum(1 for log in log_entries if log.stage == "normalize")

    # patients of this file still owned by the doctor
    patients_remaining = (
        db.query(Patient)
        .filter(
            Patient.doctor_id == doctor.doctor_id,
            Patient.source_file_name == file_import.filename,
            Patient.imported_at.isnot(None),
        )
        .count()
    )

    success_rate = round((inserted / total_records) * 100, 2) if total_records else 0.0

    return {
        "file_info": {
            "import_id": file_import.import_id,
            "filename": file_import.filename,
            "file_extension": file_import.file_extension,
            "upload_time": file_import.upload_time.isoformat() if file_import.upload_time else None,
            "processing_status": file_import.processing_status,
            "error_message": file_import.error_message,
        },
        "statistics": {
            "total_records_extracted": total_records,
            "records_parsed": parsed,
            "records_rejected": rejected_rows,
            "records_inserted": inserted,
            "records_failed": failed,
            "patients_remaining": patients_remaining,
        },
        "success_rate": success_rate,
        "row_issues": [ProcessingLogRead.model_validate(log) for log in log_entries],
    }
