# petgrid/store.py
"""Appointment store boundary.

The layout engine only reads appointments; persistence belongs here. Rows use
the remote store's snake_case schema:

  {"id": "...", "resource_id": "...", "start_time": "2024-05-02T09:00:00",
   "duration": 60, "status": "pending", "service": "...", ...}

`start_time` is a local wall-clock timestamp without offset.
"""

from __future__ import annotations

import datetime as dt
import json
import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from .model import Appointment, Resource
from .normalize import appointment_to_row, normalize_appointment, normalize_resource
from .util.console import obs
from .util.timeparse import join_local_timestamp

Row = Dict[str, Any]

# Fields a reschedule / edit may touch; the rest of the row is preserved.
_UPDATABLE_FIELDS = (
    "resource_id",
    "date",
    "start_time",
    "duration",
    "service",
    "client_name",
    "pet_name",
    "professional",
    "notes",
    "status",
)


class StoreError(RuntimeError):
    """Raised when the backing store cannot be read or written."""


class AppointmentStore(Protocol):
    def list_appointments(self, day: Optional[dt.date] = None) -> List[Appointment]:
        """Return well-formed appointments, optionally only those on `day`."""

    def get_appointment(self, appt_id: str) -> Optional[Appointment]:
        """Return one appointment or None."""

    def update_appointment(self, appt_id: str, **fields: Any) -> Appointment:
        """Persist field changes; raises KeyError for unknown ids."""

    def insert_appointment(self, row: Row) -> Appointment:
        """Persist a new appointment row and return it."""

    def delete_appointment(self, appt_id: str) -> None:
        """Remove an appointment; raises KeyError for unknown ids."""

    def list_resources(self) -> List[Resource]:
        """Return the bookable resources (rooms, tables)."""


def generate_id(prefix: str = "appt") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


class MemoryStore:
    """In-process store holding raw rows; the baseline implementation."""

    def __init__(self, appointments: Optional[List[Row]] = None, resources: Optional[List[Row]] = None) -> None:
        self._appointments: List[Row] = [dict(r) for r in (appointments or []) if isinstance(r, dict)]
        self._resources: List[Row] = [dict(r) for r in (resources or []) if isinstance(r, dict)]

    # --- hooks -----------------------------------------------------------

    def _committed(self) -> None:
        pass

    # --- reads -----------------------------------------------------------

    def list_appointments(self, day: Optional[dt.date] = None) -> List[Appointment]:
        out: List[Appointment] = []
        for row in self._appointments:
            appt = normalize_appointment(row)
            if appt is None:
                continue
            if day is not None and appt.date != day:
                continue
            out.append(appt)
        out.sort(key=lambda a: (a.date, a.start_time, a.id))
        return out

    def get_appointment(self, appt_id: str) -> Optional[Appointment]:
        row = self._find(appt_id)
        return normalize_appointment(row) if row is not None else None

    def list_resources(self) -> List[Resource]:
        out: List[Resource] = []
        for row in self._resources:
            res = normalize_resource(row)
            if res is not None:
                out.append(res)
        return out

    # --- writes ----------------------------------------------------------

    def update_appointment(self, appt_id: str, **fields: Any) -> Appointment:
        row = self._find(appt_id)
        if row is None:
            raise KeyError(appt_id)
        unknown = sorted(set(fields) - set(_UPDATABLE_FIELDS))
        if unknown:
            raise ValueError(f"cannot update field(s): {', '.join(unknown)}")

        current = normalize_appointment(row)
        if current is None:
            raise StoreError(f"appointment {appt_id!r} is malformed in the store")

        day = fields.pop("date", None) or current.date
        if not isinstance(day, dt.date):
            day = dt.date.fromisoformat(str(day))
        start_time = fields.pop("start_time", None) or current.start_time
        # Validate the merged result before touching the stored row.
        merged = dict(row)
        merged.update(fields)
        merged["start_time"] = join_local_timestamp(day, start_time)
        if "resource_id" in fields:
            merged["resource_id"] = fields["resource_id"] or None
        appt = normalize_appointment(merged)
        if appt is None:
            raise ValueError(f"update would make appointment {appt_id!r} invalid")

        row.clear()
        row.update(merged)
        self._committed()
        obs("store", f"update id={appt_id!r} resource_id={appt.resource_id!r} start_time={row['start_time']!r}")
        return appt

    def insert_appointment(self, row: Row) -> Appointment:
        new_row = dict(row)
        new_row.setdefault("id", generate_id())
        if "date" in new_row:
            d = new_row.pop("date")
            day = d if isinstance(d, dt.date) else dt.date.fromisoformat(str(d))
            new_row["start_time"] = join_local_timestamp(day, str(new_row.get("start_time") or ""))
        if self._find(str(new_row["id"])) is not None:
            raise ValueError(f"duplicate appointment id {new_row['id']!r}")
        appt = normalize_appointment(new_row)
        if appt is None:
            raise ValueError("appointment row is invalid")
        self._appointments.append(appointment_to_row(appt))
        self._committed()
        obs("store", f"insert id={appt.id!r}")
        return appt

    def delete_appointment(self, appt_id: str) -> None:
        for i, row in enumerate(self._appointments):
            if str(row.get("id") or "") == appt_id:
                del self._appointments[i]
                self._committed()
                obs("store", f"delete id={appt_id!r}")
                return
        raise KeyError(appt_id)

    def _find(self, appt_id: str) -> Optional[Row]:
        for row in self._appointments:
            if str(row.get("id") or "") == appt_id:
                return row
        return None


class JsonFileStore(MemoryStore):
    """Store backed by a JSON document {"appointments": [...], "resources": [...]}."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        appointments: List[Row] = []
        resources: List[Row] = []
        if self.path.exists():
            t0 = time.monotonic()
            try:
                doc = json.loads(self.path.read_text(encoding="utf-8", errors="replace"))
            except (OSError, ValueError) as e:
                raise StoreError(f"Failed to read store {self.path}: {e}")
            if not isinstance(doc, dict):
                raise StoreError(f"store {self.path} must hold a JSON object; got {type(doc).__name__}")
            appointments = doc.get("appointments") or []
            resources = doc.get("resources") or []
            if not isinstance(appointments, list) or not isinstance(resources, list):
                raise StoreError(f"store {self.path}: appointments/resources must be lists")
            elapsed_ms = int((time.monotonic() - t0) * 1000)
            obs("store", f"load.ok path={str(self.path)!r} ms={elapsed_ms} appointments={len(appointments)}")
        super().__init__(appointments, resources)

    def _committed(self) -> None:
        doc = {"appointments": self._appointments, "resources": self._resources}
        text = json.dumps(doc, ensure_ascii=False, indent=2) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".petgrid-", suffix=".json", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                    f.write(text)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise StoreError(f"Failed to write store {self.path}: {e}")


__all__ = [
    "AppointmentStore",
    "JsonFileStore",
    "MemoryStore",
    "StoreError",
    "generate_id",
]
