# petgrid/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .util.timeparse import format_hhmm, hhmm_to_minutes, parse_hhmm

APPOINTMENT_STATUSES = (
    "confirmed",
    "pending",
    "completed",
    "in-progress",
    "ready",
    "finished",
    "cancelled",
)

DEFAULT_PIXELS_PER_HOUR = 80.0
DEFAULT_GRID_START_HOUR = 5
DEFAULT_GRID_END_HOUR = 20
DEFAULT_SNAP_MINUTES = 15


@dataclass(frozen=True)
class GridConfig:
    """Day-grid geometry shared by layout and drop conversion."""

    pixels_per_hour: float = DEFAULT_PIXELS_PER_HOUR
    grid_start_hour: int = DEFAULT_GRID_START_HOUR
    grid_end_hour: int = DEFAULT_GRID_END_HOUR
    snap_minutes: int = DEFAULT_SNAP_MINUTES

    def __post_init__(self) -> None:
        if not self.pixels_per_hour > 0:
            raise ValueError(f"pixels_per_hour must be positive; got {self.pixels_per_hour!r}")
        if not (0 <= self.grid_start_hour <= self.grid_end_hour <= 23):
            raise ValueError(
                f"grid hours must satisfy 0 <= start <= end <= 23; "
                f"got {self.grid_start_hour!r}-{self.grid_end_hour!r}"
            )
        if int(self.snap_minutes) < 1:
            raise ValueError(f"snap_minutes must be >= 1; got {self.snap_minutes!r}")

    @property
    def window_minutes(self) -> int:
        # Last hour row is displayable, so the window closes at end_hour + 1.
        return (self.grid_end_hour + 1 - self.grid_start_hour) * 60

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pixels_per_hour": float(self.pixels_per_hour),
            "grid_start_hour": int(self.grid_start_hour),
            "grid_end_hour": int(self.grid_end_hour),
            "snap_minutes": int(self.snap_minutes),
        }


@dataclass(frozen=True)
class Appointment:
    id: str
    resource_id: str
    date: dt.date
    start_time: str
    duration: int

    service: str = ""
    client_name: str = ""
    pet_name: str = ""
    professional: str = ""
    notes: str = ""
    status: str = "pending"

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("appointment id must be a non-empty string")
        hh, mm = parse_hhmm(self.start_time)
        # Normalize "9:05" -> "09:05" so equal times compare equal.
        object.__setattr__(self, "start_time", format_hhmm(hh, mm))
        if isinstance(self.duration, bool) or not isinstance(self.duration, int) or self.duration <= 0:
            raise ValueError(f"appointment {self.id!r}: duration must be a positive int; got {self.duration!r}")
        if self.status not in APPOINTMENT_STATUSES:
            raise ValueError(f"appointment {self.id!r}: unknown status {self.status!r}")

    @property
    def start_minute_of_day(self) -> int:
        return hhmm_to_minutes(self.start_time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "resource_id": self.resource_id,
            "date": self.date.isoformat(),
            "start_time": self.start_time,
            "duration": int(self.duration),
            "service": self.service,
            "client_name": self.client_name,
            "pet_name": self.pet_name,
            "professional": self.professional,
            "notes": self.notes,
            "status": self.status,
        }


@dataclass(frozen=True)
class Resource:
    id: str
    name: str
    type: str = ""
    staff: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type, "staff": self.staff}


@dataclass(frozen=True)
class TimedEvent:
    appointment: Appointment
    start: int  # minutes since grid start
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def id(self) -> str:
        return self.appointment.id


@dataclass(frozen=True)
class PositionedEvent:
    appointment: Appointment
    start: int
    end: int
    top: float
    height: float
    column_index: int
    column_count: int
    group_index: int = 0

    @property
    def id(self) -> str:
        return self.appointment.id

    @property
    def width_percent(self) -> float:
        return 100.0 / self.column_count

    @property
    def left_percent(self) -> float:
        return self.column_index * self.width_percent

    def to_dict(self) -> Dict[str, Any]:
        out = self.appointment.to_dict()
        out.update(
            {
                "start": int(self.start),
                "end": int(self.end),
                "top": float(self.top),
                "height": float(self.height),
                "column_index": int(self.column_index),
                "column_count": int(self.column_count),
                "group_index": int(self.group_index),
                "width_percent": float(self.width_percent),
                "left_percent": float(self.left_percent),
            }
        )
        return out


@dataclass(frozen=True)
class SlotTime:
    hour: int
    minute: int

    @property
    def hhmm(self) -> str:
        return format_hhmm(self.hour, self.minute)


@dataclass(frozen=True)
class DropRejected:
    reason: str
    hour: int
    minute: int

    ok: bool = field(default=False, init=False)


@dataclass(frozen=True)
class Reschedule:
    appointment_id: str
    resource_id: str
    start_time: str
    slot: SlotTime

    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class ConflictSegment:
    resource_id: str
    start: int  # minutes since grid start
    end: int
    ids: Tuple[str, ...]
    kind: str = "overlap"  # "overlap" | "out_of_hours"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_id": self.resource_id,
            "start": int(self.start),
            "end": int(self.end),
            "ids": list(self.ids),
            "kind": self.kind,
        }


@dataclass(frozen=True)
class ResourceLoad:
    resource_id: str
    count: int
    booked_min: int
    utilization_pct: float
    peak_concurrency: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_id": self.resource_id,
            "count": int(self.count),
            "booked_min": int(self.booked_min),
            "utilization_pct": float(self.utilization_pct),
            "peak_concurrency": int(self.peak_concurrency),
        }


@dataclass(frozen=True)
class MonthCell:
    date: dt.date
    kind: str  # "prev" | "current" | "next"
    is_today: bool
    appointments: Tuple[Appointment, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "day": self.date.day,
            "kind": self.kind,
            "is_today": bool(self.is_today),
            "appointments": [
                {"id": a.id, "start_time": a.start_time, "pet_name": a.pet_name, "status": a.status}
                for a in self.appointments
            ],
        }


__all__ = [
    "APPOINTMENT_STATUSES",
    "Appointment",
    "ConflictSegment",
    "DropRejected",
    "GridConfig",
    "MonthCell",
    "PositionedEvent",
    "Reschedule",
    "Resource",
    "ResourceLoad",
    "SlotTime",
    "TimedEvent",
]
