from sqlalchemy import Column, String, Integer, DateTime, Text, CheckConstraint, ForeignKey, Uuid
from sqlalchemy.sql import func
import uuid
from clinic_queue.core.database import Base

class FileImport(Base):
    __tablename__ = "file_import"

    import_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    doctor_id = Column(Uuid(as_uuid=True), ForeignKey("doctor.doctor_id", ondelete="CASCADE"), nullable=False)
    filename = Column(Text, nullable=False)
    file_extension = Column(String(10), nullable=False)
    processing_status = Column(String, nullable=False)
    upload_time = Column(DateTime(timezone=True), server_default=func.now())
    records_extracted_from_file = Column(Integer, default=0)
    records_parsed = Column(Integer, default=0)
    records_inserted_count = Column(Integer, default=0)
    records_failed_to_insert_count = Column(Integer, default=0)
    error_message = Column(Text)

    __table_args__ = (
        CheckConstraint(
            "processing_status IN ('Uploaded', 'Success', 'Partial', 'Failed')",
            name="valid_processing_status"
        ),
    )
