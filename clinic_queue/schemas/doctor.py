from datetime import datetime
from typing import Optional, List
from uuid import UUID as PyUUID

from pydantic import BaseModel, ConfigDict, Field


class DoctorCreate(BaseModel):
    full_name: str
    email: str = Field(pattern=r"^\S+@\S+\.\S+$")
    password: str = Field(min_length=6)
    address: str = ""
    postal_code: str = ""
    city: str = ""
    specialties: List[str] = []


class DoctorUpdate(BaseModel):
    full_name: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    specialties: Optional[List[str]] = None


class DoctorLogin(BaseModel):
    email: str
    password: str


class DoctorRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    doctor_id: PyUUID
    full_name: str
    email: str
    address: Optional[str] = ""
    postal_code: Optional[str] = ""
    city: Optional[str] = ""
    specialties: List[str] = []
    is_active: bool
    last_login: Optional[datetime] = None
    sms_sent_count: int


class TokenRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
    doctor: DoctorRead
