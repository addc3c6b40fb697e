from datetime import datetime
from typing import Optional,List
from pydantic import BaseModel, ConfigDict
from uuid import UUID as PyUUID

from clinic_queue.schemas.patient import PatientRead


class FileImportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    import_id: PyUUID
    filename: str
    file_extension: str
    processing_status: str
    upload_time: Optional[datetime]
    records_extracted_from_file: int
    records_parsed: int
    records_inserted_count: int
    records_failed_to_insert_count: Optional[int]
    error_message: Optional[str] = None


class ImportResultRead(BaseModel):
    message: str
    file_import: FileImportRead
    data: List[PatientRead]
