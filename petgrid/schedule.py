# petgrid/schedule.py
from __future__ import annotations

import calendar
import datetime as dt
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .dropmap import resolve_drop
from .layout import compute_layout
from .model import (
    Appointment,
    DropRejected,
    GridConfig,
    MonthCell,
    Reschedule,
    Resource,
)
from .planner import detect_conflicts, resource_load
from .store import AppointmentStore
from .util.console import obs

MONTH_GRID_CELLS = 42

_WORD_RE = re.compile(r"\w+")


def appointments_for_day(appointments: Iterable[Appointment], day: dt.date) -> List[Appointment]:
    return [a for a in appointments if a.date == day]


def type_filter_active(type_filter: Optional[str]) -> bool:
    f = (type_filter or "").strip().casefold()
    return bool(f) and f != "all"


def _type_matches(resource_type: str, type_filter: str) -> bool:
    t = resource_type.casefold()
    f = type_filter.strip().casefold()
    if t == f:
        return True
    type_words = set(_WORD_RE.findall(t))
    return any(w in type_words for w in _WORD_RE.findall(f))


def filter_resources(resources: Sequence[Resource], type_filter: Optional[str] = None) -> List[Resource]:
    """Keep resources whose type matches `type_filter`.

    None / "" / "all" keep everything. Otherwise a type matches when it
    equals the filter case-insensitively or shares a word with it, so the
    combined "Banho & Tosa" tab also lists "Banho" and "Banho Premium".
    """
    if not type_filter_active(type_filter):
        return list(resources)
    return [r for r in resources if _type_matches(r.type, str(type_filter))]


def build_day_view(
    appointments: Iterable[Appointment],
    resources: Sequence[Resource],
    day: dt.date,
    cfg: GridConfig,
    *,
    type_filter: Optional[str] = None,
) -> Dict[str, Any]:
    """Compute the JSON-ready day grid: one column per resource.

    Appointments whose resource is not among `resources` (including
    unassigned ones) are laid out in a separate "unassigned" bucket only when
    no type filter is active.
    """
    daily = appointments_for_day(appointments, day)
    shown = filter_resources(resources, type_filter)
    known_ids = {r.id for r in resources}

    loads = resource_load(daily, cfg)
    columns: List[Dict[str, Any]] = []
    for res in shown:
        items = [a for a in daily if a.resource_id == res.id]
        load = loads.get(res.id)
        columns.append(
            {
                "resource": res.to_dict(),
                "events": [p.to_dict() for p in compute_layout(items, cfg)],
                "load": load.to_dict() if load else None,
            }
        )

    filtering = type_filter_active(type_filter)
    orphans = [] if filtering else [a for a in daily if a.resource_id not in known_ids]

    shown_ids = {r.id for r in shown}
    conflicts = [
        c.to_dict() for c in detect_conflicts(daily, cfg) if c.resource_id in shown_ids or not filtering
    ]

    return {
        "date": day.isoformat(),
        "config": cfg.to_dict(),
        "hours": [f"{h:02d}:00" for h in range(cfg.grid_start_hour, cfg.grid_end_hour + 1)],
        "type_filter": type_filter or "all",
        "columns": columns,
        "unassigned": [p.to_dict() for p in compute_layout(orphans, cfg)],
        "conflicts": conflicts,
        "summary": {
            "appointment_count": len(daily),
            "resource_count": len(shown),
            "conflict_count": sum(1 for c in conflicts if c["kind"] == "overlap"),
        },
    }


def month_grid(
    year: int,
    month: int,
    appointments: Iterable[Appointment] = (),
    *,
    today: Optional[dt.date] = None,
) -> List[MonthCell]:
    """Six-week (42 cell) month grid starting on Sunday, padded with adjacent months."""
    if not (1 <= int(month) <= 12):
        raise ValueError(f"month must be 1..12; got {month!r}")

    first = dt.date(int(year), int(month), 1)
    days_in_month = calendar.monthrange(first.year, first.month)[1]
    lead = (first.weekday() + 1) % 7  # Monday=0 -> Sunday-first column index
    grid_start = first - dt.timedelta(days=lead)
    last = first + dt.timedelta(days=days_in_month - 1)

    by_day: Dict[dt.date, List[Appointment]] = {}
    for a in appointments:
        by_day.setdefault(a.date, []).append(a)

    cells: List[MonthCell] = []
    for i in range(MONTH_GRID_CELLS):
        d = grid_start + dt.timedelta(days=i)
        if d < first:
            kind = "prev"
        elif d > last:
            kind = "next"
        else:
            kind = "current"
        # Padding cells show the date only.
        items = sorted(by_day.get(d, []), key=lambda a: (a.start_time, a.id)) if kind == "current" else []
        cells.append(
            MonthCell(
                date=d,
                kind=kind,
                is_today=(kind == "current" and today is not None and d == today),
                appointments=tuple(items),
            )
        )
    return cells


def apply_drop(
    store: AppointmentStore,
    appointment_id: str,
    offset_y: float,
    target_resource_id: str,
    cfg: GridConfig,
) -> Union[Reschedule, DropRejected]:
    """Resolve a drop and persist it; rejected drops issue no write.

    Raises KeyError when the appointment is unknown to the store.
    """
    appt = store.get_appointment(appointment_id)
    if appt is None:
        raise KeyError(appointment_id)

    res = resolve_drop(appt, offset_y, target_resource_id, cfg)
    if isinstance(res, DropRejected):
        return res

    store.update_appointment(appt.id, resource_id=res.resource_id, start_time=res.start_time)
    obs("schedule", f"drop.applied id={appt.id!r} resource_id={res.resource_id!r} start_time={res.start_time}")
    return res


__all__ = [
    "MONTH_GRID_CELLS",
    "appointments_for_day",
    "apply_drop",
    "build_day_view",
    "filter_resources",
    "month_grid",
    "type_filter_active",
]
