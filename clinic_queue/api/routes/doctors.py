from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clinic_queue.core.database import get_db
from clinic_queue.core.security import get_current_doctor
from clinic_queue.models.doctor_model import Doctor
from clinic_queue.schemas.doctor import DoctorCreate, DoctorLogin, DoctorRead, DoctorUpdate, TokenRead
from clinic_queue.services import doctor_service

router = APIRouter()


@router.post("/doctors/register", response_model=DoctorRead, status_code=201)
def register(payload: DoctorCreate, db: Session = Depends(get_db)):
    return doctor_service.register_doctor(db, payload)


@router.post("/doctors/login", response_model=TokenRead)
def login(payload: DoctorLogin, db: Session = Depends(get_db)):
    doctor, token = doctor_service.login(db, payload)
    return {"access_token": token, "doctor": DoctorRead.model_validate(doctor)}


@router.get("/doctors/me", response_model=DoctorRead)
def me(doctor: Doctor = Depends(get_current_doctor)):
    return doctor


@router.put("/doctors/me", response_model=DoctorRead)
def update_me(
    payload: DoctorUpdate,
    doctor: Doctor = Depends(get_current_doctor),
    db: Session = Depends(get_db),
):
    return doctor_service.update_profile(db, doctor.doctor_id, payload)
