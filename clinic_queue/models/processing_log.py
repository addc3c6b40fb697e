from sqlalchemy import Column, String, ForeignKey, Integer, DateTime, Text, Uuid
from sqlalchemy.sql import func
from clinic_queue.core.database import Base
import uuid

class ProcessingLog(Base):
    __tablename__ = "processing_log"
    log_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    import_id = Column(Uuid(as_uuid=True), ForeignKey("file_import.import_id", ondelete="CASCADE"), nullable=False)
    log_timestamp = Column(DateTime(timezone=True), server_default=func.now())
    row_number = Column(Integer, nullable=False)
    stage = Column(String(16), nullable=False)  # normalize | persist
    message = Column(Text)
