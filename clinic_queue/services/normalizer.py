"""
Record normalization: turns a raw import row, whatever its column dialect,
into the canonical patient shape.
"""
import math
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import UUID

from clinic_queue.models.patient_model import PatientStatus

# Ordered by priority; the first alias carrying a non-empty value wins.
FIELD_ALIASES: List[Tuple[str, List[str]]] = [
    ("full_name", ["fullName", "nomComplet", "nom-complet", "Nom", "nom", "name"]),
    ("phone", ["phone", "telephone", "num-telephone", "Téléphone", "tel"]),
    ("scheduled_time", ["scheduledTime", "heureRendezVous", "heure-de-rendez-vous", "Heure RDV", "heure"]),
    ("estimated_time", ["estimatedTime", "heureEstimee", "heure-estimee", "Heure estimée"]),
    ("notes", ["notes", "Notes", "remarques"]),
]


@dataclass
class PatientCandidate:
    full_name: str
    phone: str
    scheduled_time: str
    estimated_time: str
    doctor_id: UUID
    doctor_name: str
    source_file_name: Optional[str]
    imported_at: datetime
    notes: Optional[str] = None
    status: str = PatientStatus.PENDING.value
    notification_sent: bool = False
    delay_minutes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def clean_value(value: Any) -> str:
    """Stringify and trim a cell; None, NaN and blanks become ''."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def resolve_fields(row: Mapping[str, Any]) -> Dict[str, str]:
    resolved = {}
    for field, aliases in FIELD_ALIASES:
        resolved[field] = ""
        for alias in aliases:
            value = clean_value(row.get(alias))
            if value:
                resolved[field] = value
                break
    return resolved


def normalize_row(
    row: Mapping[str, Any],
    doctor_id: UUID,
    doctor_name: str,
    source_file_name: Optional[str],
    now: Optional[datetime] = None,
) -> Optional[PatientCandidate]:
    """Returns None when the row has no usable name or phone."""
    fields = resolve_fields(row)
    if not fields["full_name"] or not fields["phone"]:
        return None

    now = now or datetime.now(timezone.utc)
    scheduled_time = fields["scheduled_time"] or now.isoformat()
    estimated_time = fields["estimated_time"] or scheduled_time

    return PatientCandidate(
        full_name=fields["full_name"],
        phone=fields["phone"],
        scheduled_time=scheduled_time,
        estimated_time=estimated_time,
        doctor_id=doctor_id,
        doctor_name=doctor_name,
        source_file_name=source_file_name,
        imported_at=now,
        notes=fields["notes"] or None,
    )
