import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clinic_queue.core.config import CORS_ORIGINS
from clinic_queue.core.database import engine, Base
from clinic_queue.core.exceptions import ClinicQueueError, clinic_queue_error_handler, unhandled_error_handler
from clinic_queue.core.logging_config import setup_logging
from clinic_queue.api.routes import doctors
from clinic_queue.api.routes import patients
from clinic_queue.api.routes import file_import
from clinic_queue.api.routes import file_list
from clinic_queue.api.routes import file_report

# Import models so SQLAlchemy registers tables.
from clinic_queue.models import doctor_model, patient_model, processing_log  # noqa: F401
from clinic_queue.models import file_import as file_import_model  # noqa: F401

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Clinic Queue")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(CORS_ORIGINS),  # Frontend origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ClinicQueueError, clinic_queue_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)


@app.on_event("startup")
def startup():
    logger.info("Creating tables: %s", ", ".join(Base.metadata.tables.keys()))
    Base.metadata.create_all(bind=engine)


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(doctors.router, prefix="/api", tags=["Doctors"])
app.include_router(file_import.router, prefix="/api", tags=["Patient Import"])
app.include_router(patients.router, prefix="/api", tags=["Patients"])
app.include_router(file_list.router, prefix="/api", tags=["Import List"])
app.include_router(file_report.router, prefix="/api", tags=["Import Report"])
