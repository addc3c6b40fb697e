import logging

from sqlalchemy.orm import Session

from clinic_queue.core.exceptions import AuthenticationError, ConstraintViolation, ValidationError
from clinic_queue.core.security import create_access_token, hash_password, verify_password
from clinic_queue.models.doctor_model import Doctor
from clinic_queue.schemas.doctor import DoctorCreate, DoctorLogin, DoctorUpdate
from clinic_queue.services.stores import DoctorDirectory

logger = logging.getLogger(__name__)


def register_doctor(db: Session, payload: DoctorCreate) -> Doctor:
    directory = DoctorDirectory(db)
    email = payload.email.strip().lower()
    if directory.find_by_email(email):
        raise ConstraintViolation("A doctor with this email already exists")

    doctor = directory.create(
        full_name=payload.full_name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        address=payload.address.strip(),
        postal_code=payload.postal_code.strip(),
        city=payload.city.strip(),
        specialties=[s.strip() for s in payload.specialties if s.strip()],
    )
    logger.info("Doctor %s registered", doctor.doctor_id)
    return doctor


def login(db: Session, payload: DoctorLogin):
    directory = DoctorDirectory(db)
    doctor = directory.find_by_email(payload.email)
    if not doctor or not verify_password(payload.password, doctor.password_hash):
        raise AuthenticationError("Invalid email or password")
    if not doctor.is_active:
        raise AuthenticationError("Account is not activated")

    doctor = directory.touch_login(doctor)
    return doctor, create_access_token(doctor)


def update_profile(db: Session, doctor_id, payload: DoctorUpdate) -> Doctor:
    patch = {}
    for key, value in payload.model_dump(exclude_none=True).items():
        if key == "specialties":
            patch[key] = [s.strip() for s in value if s.strip()]
        else:
            patch[key] = value.strip()
    if "full_name" in patch and not patch["full_name"]:
        raise ValidationError("full_name cannot be empty")

    doctor = DoctorDirectory(db).update(doctor_id, patch)
    logger.info("Doctor %s updated profile fields %s", doctor_id, sorted(patch))
    return doctor
