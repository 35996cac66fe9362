# petgrid/normalize.py
from __future__ import annotations

from typing import Any, Dict, Optional

from .model import APPOINTMENT_STATUSES, Appointment, Resource
from .util.console import obs
from .util.timeparse import join_local_timestamp, split_local_timestamp


def _str(v: Any) -> str:
    return "" if v is None else str(v)


def _name(row: Dict[str, Any], key: str, nested: str) -> str:
    # Store rows carry joined names either flat ("client_name") or nested ({"clients": {"name": ...}}).
    v = row.get(key)
    if isinstance(v, str) and v.strip():
        return v
    sub = row.get(nested)
    if isinstance(sub, dict) and isinstance(sub.get("name"), str):
        return sub["name"]
    return ""


def normalize_appointment(row: Dict[str, Any]) -> Optional[Appointment]:
    """Store row -> Appointment, or None when the row cannot be laid out."""
    if not isinstance(row, dict):
        return None
    appt_id = _str(row.get("id")).strip()
    if not appt_id:
        obs("normalize", "WARN: skipping appointment row without id")
        return None

    parts = split_local_timestamp(_str(row.get("start_time")))
    if parts is None:
        obs("normalize", f"WARN: invalid start_time id={appt_id!r} value={row.get('start_time')!r}")
        return None
    day, hhmm = parts

    duration = row.get("duration")
    if isinstance(duration, float) and duration.is_integer():
        duration = int(duration)
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        obs("normalize", f"WARN: invalid duration id={appt_id!r} value={duration!r}")
        return None

    status = _str(row.get("status")).strip() or "pending"
    if status not in APPOINTMENT_STATUSES:
        obs("normalize", f"WARN: unknown status id={appt_id!r} value={status!r}")
        return None

    return Appointment(
        id=appt_id,
        resource_id=_str(row.get("resource_id")).strip(),
        date=day,
        start_time=hhmm,
        duration=duration,
        service=_str(row.get("service")),
        client_name=_name(row, "client_name", "clients"),
        pet_name=_name(row, "pet_name", "pets"),
        professional=_str(row.get("professional")),
        notes=_str(row.get("notes")),
        status=status,
    )


def appointment_to_row(appt: Appointment) -> Dict[str, Any]:
    """Appointment -> store row (inverse of normalize_appointment)."""
    return {
        "id": appt.id,
        "resource_id": appt.resource_id or None,
        "start_time": join_local_timestamp(appt.date, appt.start_time),
        "duration": int(appt.duration),
        "service": appt.service,
        "client_name": appt.client_name,
        "pet_name": appt.pet_name,
        "professional": appt.professional,
        "notes": appt.notes,
        "status": appt.status,
    }


def normalize_resource(row: Dict[str, Any]) -> Optional[Resource]:
    if not isinstance(row, dict):
        return None
    rid = _str(row.get("id")).strip()
    if not rid:
        obs("normalize", "WARN: skipping resource row without id")
        return None
    staff = row.get("staff")
    return Resource(
        id=rid,
        name=_str(row.get("name")) or rid,
        type=_str(row.get("type")),
        staff=str(staff) if isinstance(staff, str) and staff else None,
    )


__all__ = [
    "appointment_to_row",
    "normalize_appointment",
    "normalize_resource",
]
