import logging
import os
from contextlib import contextmanager
from typing import Optional
from uuid import uuid4

from clinic_queue.core import config
from clinic_queue.core.exceptions import UnsupportedFormat, ValidationError

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024


def check_extension(filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in config.ALLOWED_EXTENSIONS:
        raise UnsupportedFormat("Only CSV and Excel files are allowed (.csv, .xlsx, .xls)")
    return ext


def save_file_locally(file, filename: str, upload_dir: Optional[str] = None, max_bytes: Optional[int] = None) -> str:
    ext = check_extension(filename)
    upload_dir = upload_dir or config.UPLOAD_DIR
    max_bytes = max_bytes or config.MAX_UPLOAD_BYTES
    os.makedirs(upload_dir, exist_ok=True)
    file_path = os.path.join(upload_dir, f"{uuid4()}{ext}")
    written = 0
    try:
        with open(file_path, "wb") as f:
            while True:
                chunk = file.read(COPY_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise ValidationError(f"File exceeds the {max_bytes // (1024 * 1024)} MB limit")
                f.write(chunk)
    except Exception:
        remove_file(file_path)
        raise
    return file_path


def remove_file(file_path: str) -> None:
    try:
        os.remove(file_path)
    except FileNotFoundError:
        pass


@contextmanager
def staged_upload(file, filename: str):
    """Stage an upload on disk for the duration of the block, then delete it."""
    file_path = save_file_locally(file, filename)
    logger.info("Staged upload %s as %s", filename, file_path)
    try:
        yield file_path
    finally:
        remove_file(file_path)
