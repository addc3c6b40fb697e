from enum import Enum
from decouple import config, Csv


class MessagingBackend(str, Enum):
    SIMULATED = "simulated"
    TWILIO = "twilio"


DATABASE_URL = config("DATABASE_URL", default="sqlite:///./clinic_queue.db")

JWT_SECRET = config("JWT_SECRET", default="change-me")
JWT_ALGORITHM = config("JWT_ALGORITHM", default="HS256")
JWT_EXPIRES_HOURS = config("JWT_EXPIRES_HOURS", default=24, cast=int)

UPLOAD_DIR = config("UPLOAD_DIR", default="uploads")
MAX_UPLOAD_BYTES = config("MAX_UPLOAD_BYTES", default=10 * 1024 * 1024, cast=int)
ALLOWED_EXTENSIONS = (".csv", ".xlsx", ".xls")

MESSAGING_BACKEND = config("MESSAGING_BACKEND", default="simulated", cast=MessagingBackend)  # switch to 'twilio' in prod
TWILIO_ACCOUNT_SID = config("TWILIO_ACCOUNT_SID", default="")
TWILIO_AUTH_TOKEN = config("TWILIO_AUTH_TOKEN", default="")
TWILIO_FROM_NUMBER = config("TWILIO_FROM_NUMBER", default="")

CORS_ORIGINS = config("CORS_ORIGINS", default="http://localhost:5173", cast=Csv())

LOG_LEVEL = config("LOG_LEVEL", default="INFO")
LOG_FORMAT = config("LOG_FORMAT", default="text")
