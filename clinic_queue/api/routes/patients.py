from dataclasses import asdict
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from clinic_queue.core.database import get_db
from clinic_queue.core.security import get_current_doctor
from clinic_queue.models.doctor_model import Doctor
from clinic_queue.models.patient_model import PatientStatus
from clinic_queue.schemas.patient import (
    BulkNotifyRead,
    PatientCreate,
    PatientRead,
    PatientStats,
    PatientUpdate,
    SmsRequest,
)
from clinic_queue.services import patient_service
from clinic_queue.services.messaging import get_dispatcher

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _attachment(extension: str) -> dict:
    stamp = int(datetime.now().timestamp() * 1000)
    return {"Content-Disposition": f"attachment; filename=patients_{stamp}.{extension}"}


@router.post("/patients", status_code=201)
def create_patient(
    payload: PatientCreate,
    db: Session = Depends(get_db),
    doctor: Doctor = Depends(get_current_doctor),
):
    patient = patient_service.create_patient(db, payload, doctor.doctor_id)
    return {"success": True, "message": "Patient created", "data": PatientRead.model_validate(patient)}


@router.get("/patients")
def list_patients(
    status: Optional[PatientStatus] = None,
    notification_sent: Optional[bool] = None,
    db: Session = Depends(get_db),
    doctor: Doctor = Depends(get_current_doctor),
):
    patients = patient_service.list_patients(db, doctor.doctor_id, status, notification_sent)
    return {
        "success": True,
        "count": len(patients),
        "data": [PatientRead.model_validate(p) for p in patients],
    }


@router.get("/patients/stats", response_model=PatientStats)
def patient_stats(db: Session = Depends(get_db), doctor: Doctor = Depends(get_current_doctor)):
    return patient_service.patient_stats(db, doctor.doctor_id)


@router.get("/patients/export/csv")
def export_csv(db: Session = Depends(get_db), doctor: Doctor = Depends(get_current_doctor)):
    content = patient_service.export_csv(db, doctor.doctor_id)
    return Response(content=content, media_type="text/csv; charset=utf-8", headers=_attachment("csv"))


@router.get("/patients/export/excel")
def export_excel(db: Session = Depends(get_db), doctor: Doctor = Depends(get_current_doctor)):
    content = patient_service.export_excel(db, doctor.doctor_id)
    return Response(content=content, media_type=XLSX_MEDIA_TYPE, headers=_attachment("xlsx"))


@router.post("/patients/sms/delay-bulk")
def send_bulk_delay_sms(
    db: Session = Depends(get_db),
    doctor: Doctor = Depends(get_current_doctor),
    dispatcher=Depends(get_dispatcher),
):
    result = patient_service.send_bulk_delay_sms(db, dispatcher, doctor.doctor_id)
    return {
        "success": True,
        "message": f"SMS sent: {result.sent_count}/{result.total_candidates} patients",
        "data": BulkNotifyRead.model_validate(asdict(result)),
    }


@router.get("/patients/{patient_id}")
def get_patient(patient_id: UUID, db: Session = Depends(get_db), doctor: Doctor = Depends(get_current_doctor)):
    patient = patient_service.get_patient(db, patient_id, doctor.doctor_id)
    return {"success": True, "data": PatientRead.model_validate(patient)}


@router.put("/patients/{patient_id}")
def update_patient(
    patient_id: UUID,
    payload: PatientUpdate,
    db: Session = Depends(get_db),
    doctor: Doctor = Depends(get_current_doctor),
):
    patient = patient_service.update_patient(db, patient_id, doctor.doctor_id, payload)
    return {"success": True, "message": "Patient updated", "data": PatientRead.model_validate(patient)}


@router.delete("/patients/{patient_id}")
def delete_patient(patient_id: UUID, db: Session = Depends(get_db), doctor: Doctor = Depends(get_current_doctor)):
    patient_service.delete_patient(db, patient_id, doctor.doctor_id)
    return {"success": True, "message": "Patient deleted", "data": {"patient_id": patient_id}}


@router.post("/patients/{patient_id}/sms")
def send_sms(
    patient_id: UUID,
    payload: SmsRequest,
    db: Session = Depends(get_db),
    doctor: Doctor = Depends(get_current_doctor),
    dispatcher=Depends(get_dispatcher),
):
    patient = patient_service.send_sms(db, dispatcher, patient_id, doctor.doctor_id, payload.message)
    return {
        "success": True,
        "message": f"SMS sent to {patient.full_name}",
        "data": PatientRead.model_validate(patient),
    }
