"""Appointment and layout validation helpers (library-facing)."""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Sequence, Tuple

from .layout import max_concurrency, to_timed_event
from .model import Appointment, GridConfig, PositionedEvent


class AppointmentValidationError(ValueError):
    """Raised when a set of appointments cannot be laid out together."""


class LayoutValidationError(ValueError):
    """Raised when a computed layout breaks a packing invariant."""


_GEOM_EPS = 1e-6


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def validate_appointments(appointments: Sequence[Appointment], *, label: str = "appointments") -> List[str]:
    errs: List[str] = []
    for i, a in enumerate(appointments):
        _require(isinstance(a, Appointment), f"{label}[{i}] must be an Appointment", errs)
    if errs:
        return errs

    counts = Counter(a.id for a in appointments)
    for appt_id, n in sorted(counts.items()):
        _require(n == 1, f"{label}: duplicate id {appt_id!r} ({n} times)", errs)

    days = sorted({a.date.isoformat() for a in appointments})
    _require(len(days) <= 1, f"{label}: expected a single day; got {', '.join(days)}", errs)
    return errs


def validate_layout(
    appointments: Sequence[Appointment],
    positioned: Sequence[PositionedEvent],
    cfg: GridConfig,
    *,
    label: str = "layout",
) -> List[str]:
    """Check coverage, per-column disjointness, group consistency and geometry.

    `positioned` must come from per-resource layouts (compute_layout on one
    resource, or the flattened values of layout_by_resource).
    """
    errs: List[str] = []

    in_ids = Counter(a.id for a in appointments)
    out_ids = Counter(p.id for p in positioned)
    for appt_id in sorted(set(in_ids) | set(out_ids)):
        _require(
            in_ids[appt_id] == out_ids[appt_id],
            f"{label}: id {appt_id!r} appears {out_ids[appt_id]} time(s) in output, {in_ids[appt_id]} in input",
            errs,
        )

    groups: Dict[Tuple[str, int], List[PositionedEvent]] = {}
    for p in positioned:
        groups.setdefault((p.appointment.resource_id, p.group_index), []).append(p)

        _require(p.end > p.start, f"{label}: {p.id!r} has end <= start", errs)
        _require(
            0 <= p.column_index < p.column_count,
            f"{label}: {p.id!r} column_index {p.column_index} outside 0..{p.column_count - 1}",
            errs,
        )
        ev = to_timed_event(p.appointment, cfg)
        _require((ev.start, ev.end) == (p.start, p.end), f"{label}: {p.id!r} interval does not match its start_time", errs)
        exp_top = (p.start / 60.0) * float(cfg.pixels_per_hour)
        exp_h = (p.appointment.duration / 60.0) * float(cfg.pixels_per_hour)
        _require(abs(p.top - exp_top) < _GEOM_EPS, f"{label}: {p.id!r} top {p.top} != {exp_top}", errs)
        _require(abs(p.height - exp_h) < _GEOM_EPS, f"{label}: {p.id!r} height {p.height} != {exp_h}", errs)

    for (rid, gidx), members in sorted(groups.items()):
        where = f"{label}: resource {rid!r} group {gidx}"
        counts = {p.column_count for p in members}
        _require(len(counts) == 1, f"{where}: inconsistent column_count {sorted(counts)}", errs)

        by_col: Dict[int, List[PositionedEvent]] = {}
        for p in members:
            by_col.setdefault(p.column_index, []).append(p)
        for col, items in sorted(by_col.items()):
            items = sorted(items, key=lambda x: (x.start, x.end))
            for a, b in zip(items, items[1:]):
                _require(
                    a.end <= b.start,
                    f"{where}: column {col} overlaps {a.id!r} [{a.start},{a.end}) and {b.id!r} [{b.start},{b.end})",
                    errs,
                )

        used = len(by_col)
        peak = max_concurrency(to_timed_event(p.appointment, cfg) for p in members)
        _require(used <= peak, f"{where}: {used} columns exceed peak concurrency {peak}", errs)
        if len(counts) == 1:
            _require(used == next(iter(counts)), f"{where}: column_count {next(iter(counts))} != columns used {used}", errs)

    return errs


def assert_valid_appointments(appointments: Sequence[Appointment]) -> None:
    errs = validate_appointments(appointments)
    if errs:
        raise AppointmentValidationError(errs[0])


def assert_valid_layout(
    appointments: Sequence[Appointment],
    positioned: Sequence[PositionedEvent],
    cfg: GridConfig,
) -> None:
    errs = validate_layout(appointments, positioned, cfg)
    if errs:
        raise LayoutValidationError(errs[0])


__all__ = [
    "AppointmentValidationError",
    "LayoutValidationError",
    "assert_valid_appointments",
    "assert_valid_layout",
    "validate_appointments",
    "validate_layout",
]
