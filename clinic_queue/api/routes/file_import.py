from fastapi import APIRouter, UploadFile, File, Depends
from sqlalchemy.orm import Session

from clinic_queue.core.database import get_db
from clinic_queue.core.exceptions import ValidationError
from clinic_queue.core.security import get_current_doctor
from clinic_queue.models.doctor_model import Doctor
from clinic_queue.schemas.file_import import FileImportRead, ImportResultRead
from clinic_queue.schemas.patient import PatientRead
from clinic_queue.services import patient_service
from clinic_queue.services.storage_service import check_extension, staged_upload

router = APIRouter()


@router.post("/patients/import", response_model=ImportResultRead)
def import_patients(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    doctor: Doctor = Depends(get_current_doctor),
):
    if not file.filename:
        raise ValidationError("Please select a file")
    check_extension(file.filename)

    with staged_upload(file.file, file.filename) as file_path:
        result = patient_service.import_from_file(db, file_path, doctor.doctor_id, file.filename)

    return {
        "message": f"{len(result.saved)} patients imported successfully",
        "file_import": FileImportRead.model_validate(result.file_import),
        "data": [PatientRead.model_validate(p) for p in result.saved],
    }
