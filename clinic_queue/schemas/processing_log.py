from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional

class ProcessingLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    row_number: int
    stage: str
    message: Optional[str]
    log_timestamp: Optional[datetime]
