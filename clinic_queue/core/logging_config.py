import json
import logging
import re
from datetime import datetime, timezone

from clinic_queue.core.config import LOG_FORMAT, LOG_LEVEL

PHONE_PATTERN = re.compile(r"(?<!\d)(?:\+\d{1,3}[ .]?|0)\d(?:[ .]?\d){7,12}(?!\d)")


class PhoneMaskingFilter(logging.Filter):
    """Masks phone numbers in log messages, keeping the first and last digits."""

    @staticmethod
    def mask_phone(phone: str) -> str:
        digits = re.sub(r"\D", "", phone)
        if len(digits) < 8:
            return phone
        return digits[:3] + "*" * (len(digits) - 5) + digits[-2:]

    def filter(self, record):
        message = record.getMessage()
        masked = PHONE_PATTERN.sub(lambda m: self.mask_phone(m.group(0)), message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = LOG_LEVEL, fmt: str = LOG_FORMAT) -> logging.Logger:
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    # idempotent across reloads
    for handler in list(logger.handlers):
        if getattr(handler, "_clinic_queue", False):
            logger.removeHandler(handler)

    console = logging.StreamHandler()
    console._clinic_queue = True
    if fmt == "json":
        console.setFormatter(JsonFormatter())
    else:
        console.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    console.addFilter(PhoneMaskingFilter())
    logger.addHandler(console)

    return logger
