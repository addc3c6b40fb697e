import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from clinic_queue.core.config import JWT_ALGORITHM, JWT_EXPIRES_HOURS, JWT_SECRET
from clinic_queue.core.database import get_db
from clinic_queue.core.exceptions import AuthenticationError, NotFound
from clinic_queue.models.doctor_model import Doctor
from clinic_queue.services.stores import DoctorDirectory

PBKDF2_ITERATIONS = 260000


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        _, iterations, salt, expected = password_hash.split("$")
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def create_access_token(doctor: Doctor) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(doctor.doctor_id),
        "email": doctor.email,
        "iat": now,
        "exp": now + timedelta(hours=JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> UUID:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError) as e:
        raise AuthenticationError("Please authenticate") from e


def get_current_doctor(authorization: str = Header(default=""), db: Session = Depends(get_db)) -> Doctor:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Missing bearer token")

    doctor_id = decode_access_token(token.strip())
    try:
        doctor = DoctorDirectory(db).find_by_id(doctor_id)
    except NotFound as e:
        raise AuthenticationError("Unknown or inactive account") from e
    if not doctor.is_active:
        raise AuthenticationError("Unknown or inactive account")
    return doctor
