"""petgrid.api

Stable *library* entrypoint for petgrid.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union

from petgrid.config import grid_config_from_env, grid_config_from_mapping
from petgrid.dropmap import pixel_offset_to_time, resolve_drop, time_to_pixel_offset
from petgrid.layout import compute_layout, layout_by_resource, max_concurrency
from petgrid.model import (
    Appointment,
    ConflictSegment,
    DropRejected,
    GridConfig,
    MonthCell,
    PositionedEvent,
    Reschedule,
    Resource,
    ResourceLoad,
    SlotTime,
    TimedEvent,
)
from petgrid.normalize import normalize_appointment, normalize_resource
from petgrid.planner import detect_conflicts, resource_load
from petgrid.schedule import apply_drop, appointments_for_day, build_day_view, filter_resources, month_grid
from petgrid.store import AppointmentStore, JsonFileStore, MemoryStore, StoreError
from petgrid.validate import (
    AppointmentValidationError,
    LayoutValidationError,
    assert_valid_layout,
    validate_layout,
)

JsonPath = Union[str, Path]


def load_store(path: JsonPath) -> JsonFileStore:
    """Open (or lazily create on first write) a JSON appointment store."""
    return JsonFileStore(Path(path))


def appointments_from_rows(rows: Iterable[dict]) -> List[Appointment]:
    """Normalize raw store rows, dropping the ones that cannot be laid out."""
    out: List[Appointment] = []
    for row in rows:
        appt = normalize_appointment(row)
        if appt is not None:
            out.append(appt)
    return out


__all__ = [
    "Appointment",
    "AppointmentStore",
    "AppointmentValidationError",
    "ConflictSegment",
    "DropRejected",
    "GridConfig",
    "JsonFileStore",
    "LayoutValidationError",
    "MemoryStore",
    "MonthCell",
    "PositionedEvent",
    "Reschedule",
    "Resource",
    "ResourceLoad",
    "SlotTime",
    "StoreError",
    "TimedEvent",
    "apply_drop",
    "appointments_for_day",
    "appointments_from_rows",
    "assert_valid_layout",
    "build_day_view",
    "compute_layout",
    "detect_conflicts",
    "filter_resources",
    "grid_config_from_env",
    "grid_config_from_mapping",
    "layout_by_resource",
    "load_store",
    "max_concurrency",
    "month_grid",
    "normalize_appointment",
    "normalize_resource",
    "pixel_offset_to_time",
    "resolve_drop",
    "resource_load",
    "time_to_pixel_offset",
    "validate_layout",
]
