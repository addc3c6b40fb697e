import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ClinicQueueError(Exception):
    """Base class for failures reported to API callers as a structured outcome."""

    kind = "error"
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(ClinicQueueError):
    kind = "validation_error"
    status_code = 422


class AuthenticationError(ClinicQueueError):
    kind = "authentication_error"
    status_code = 401


class NotFound(ClinicQueueError):
    kind = "not_found"
    status_code = 404


class UnsupportedFormat(ClinicQueueError):
    kind = "unsupported_format"
    status_code = 400


class ReadError(ClinicQueueError):
    kind = "read_error"
    status_code = 400


class EmptyBatch(ClinicQueueError):
    kind = "empty_batch"
    status_code = 400


class NoRecordsPersisted(ClinicQueueError):
    kind = "no_records_persisted"
    status_code = 400

    def __init__(self, message: str = "", failures=None):
        super().__init__(message)
        self.failures = failures or []


class NoRecords(ClinicQueueError):
    kind = "no_records"
    status_code = 404


class ConstraintViolation(ClinicQueueError):
    kind = "constraint_violation"
    status_code = 409


class DispatchError(ClinicQueueError):
    kind = "dispatch_error"
    status_code = 502


def error_body(kind: str, message: str) -> dict:
    return {"success": False, "error": {"kind": kind, "message": message}}


async def clinic_queue_error_handler(request: Request, exc: ClinicQueueError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.kind, exc.message))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("server_error", str(exc)))
