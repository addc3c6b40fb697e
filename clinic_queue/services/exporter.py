import logging
from io import BytesIO
from typing import List
from uuid import UUID

import pandas as pd

from clinic_queue.core.exceptions import NoRecords

logger = logging.getLogger(__name__)

# (export header, patient attribute)
EXPORT_COLUMNS = [
    ("fullName", "full_name"),
    ("phone", "phone"),
    ("scheduledTime", "scheduled_time"),
    ("estimatedTime", "estimated_time"),
    ("status", "status"),
    ("notes", "notes"),
]
EXCEL_SHEET_NAME = "Patients"


def load_for_export(store, doctor_id: UUID) -> List:
    patients = store.find(doctor_id)
    if not patients:
        raise NoRecords("No patients to export")
    return patients


def patients_frame(patients) -> pd.DataFrame:
    rows = [
        {header: ("" if getattr(p, attr) is None else str(getattr(p, attr))) for header, attr in EXPORT_COLUMNS}
        for p in patients
    ]
    return pd.DataFrame(rows, columns=[header for header, _ in EXPORT_COLUMNS])


def export_csv(store, doctor_id: UUID) -> str:
    patients = load_for_export(store, doctor_id)
    # pandas quotes minimally: fields holding a comma, quote or newline, quotes doubled
    content = patients_frame(patients).to_csv(index=False, lineterminator="\n")
    logger.info("Exported %d patients to CSV for doctor %s", len(patients), doctor_id)
    return content


def export_excel(store, doctor_id: UUID) -> bytes:
    patients = load_for_export(store, doctor_id)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        patients_frame(patients).to_excel(writer, sheet_name=EXCEL_SHEET_NAME, index=False)
    logger.info("Exported %d patients to Excel for doctor %s", len(patients), doctor_id)
    return buffer.getvalue()
