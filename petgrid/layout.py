# petgrid/layout.py
"""Overlap grouping and side-by-side column assignment for one day grid.

Input appointments are expected to be already filtered to a single day.
`compute_layout` treats them as one resource column; `layout_by_resource`
partitions by resource first.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from .model import Appointment, GridConfig, PositionedEvent, TimedEvent


def to_timed_event(appt: Appointment, cfg: GridConfig) -> TimedEvent:
    start = appt.start_minute_of_day - int(cfg.grid_start_hour) * 60
    return TimedEvent(appointment=appt, start=start, end=start + int(appt.duration))


def _sort_key(ev: TimedEvent) -> tuple:
    # Longer events first on equal start; id keeps the order input-independent.
    return (ev.start, -ev.duration, ev.id)


def to_timed_events(appointments: Iterable[Appointment], cfg: GridConfig) -> List[TimedEvent]:
    events = [to_timed_event(a, cfg) for a in appointments]
    events.sort(key=_sort_key)
    return events


def group_overlaps(events: Sequence[TimedEvent]) -> List[List[TimedEvent]]:
    """Split sorted events into overlap groups (chains, not cliques).

    An event joins the current group while its start is strictly before the
    group's running max end; touching intervals start a new group.
    """
    groups: List[List[TimedEvent]] = []
    cur: List[TimedEvent] = []
    max_end = 0
    for ev in events:
        if not cur:
            cur = [ev]
            max_end = ev.end
            continue
        if ev.start < max_end:
            cur.append(ev)
            max_end = max(max_end, ev.end)
        else:
            groups.append(cur)
            cur = [ev]
            max_end = ev.end
    if cur:
        groups.append(cur)
    return groups


def assign_columns(group: Sequence[TimedEvent]) -> List[int]:
    """First-fit: column i is free for ev when its last end <= ev.start."""
    column_ends: List[int] = []
    out: List[int] = []
    for ev in group:
        col = -1
        for i, col_end in enumerate(column_ends):
            if col_end <= ev.start:
                col = i
                break
        if col < 0:
            col = len(column_ends)
            column_ends.append(ev.end)
        else:
            column_ends[col] = ev.end
        out.append(col)
    return out


def max_concurrency(events: Iterable[TimedEvent]) -> int:
    """Peak number of events active at one instant ([start, end) semantics)."""
    pts: List[tuple] = []
    for ev in events:
        pts.append((ev.start, 1))
        pts.append((ev.end, -1))
    # Ends sort before starts at the same instant.
    pts.sort()
    active = 0
    peak = 0
    for _t, delta in pts:
        active += delta
        peak = max(peak, active)
    return peak


def compute_layout(appointments: Iterable[Appointment], cfg: GridConfig) -> List[PositionedEvent]:
    events = to_timed_events(appointments, cfg)
    pph = float(cfg.pixels_per_hour)

    out: List[PositionedEvent] = []
    for group_index, group in enumerate(group_overlaps(events)):
        cols = assign_columns(group)
        total = max(1, max(cols) + 1)
        for ev, col in zip(group, cols):
            out.append(
                PositionedEvent(
                    appointment=ev.appointment,
                    start=ev.start,
                    end=ev.end,
                    top=(ev.start / 60.0) * pph,
                    height=(ev.duration / 60.0) * pph,
                    column_index=col,
                    column_count=total,
                    group_index=group_index,
                )
            )
    return out


def partition_by_resource(appointments: Iterable[Appointment]) -> Dict[str, List[Appointment]]:
    out: Dict[str, List[Appointment]] = {}
    for a in appointments:
        out.setdefault(a.resource_id, []).append(a)
    return out


def layout_by_resource(appointments: Iterable[Appointment], cfg: GridConfig) -> Dict[str, List[PositionedEvent]]:
    return {rid: compute_layout(items, cfg) for rid, items in partition_by_resource(appointments).items()}


__all__ = [
    "assign_columns",
    "compute_layout",
    "group_overlaps",
    "layout_by_resource",
    "max_concurrency",
    "partition_by_resource",
    "to_timed_event",
    "to_timed_events",
]
