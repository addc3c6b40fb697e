from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from clinic_queue.core.database import get_db
from clinic_queue.core.security import get_current_doctor
from clinic_queue.models.doctor_model import Doctor
from clinic_queue.models.file_import import FileImport

router = APIRouter()

@router.get("/imports")
def list_imports(db: Session = Depends(get_db), doctor: Doctor = Depends(get_current_doctor)):
    files = (
        db.query(FileImport)
        .filter(FileImport.doctor_id == doctor.doctor_id)
        .order_by(FileImport.upload_time.desc())
        .all()
    )

    return [
        {
            "import_id": file.import_id,
            "filename": file.filename,
            "file_extension": file.file_extension,
            "upload_time": file.upload_time.isoformat() if file.upload_time else None,
            "processing_status": file.processing_status,
            "records_extracted": file.records_extracted_from_file,
            "records_parsed": file.records_parsed,
            "records_inserted": file.records_inserted_count,
            "records_failed": file.records_failed_to_insert_count,
        }
        for file in files
    ]
