# petgrid/planner.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set, Tuple

from .layout import max_concurrency, partition_by_resource, to_timed_events
from .model import Appointment, ConflictSegment, GridConfig, ResourceLoad, TimedEvent


def _overlap_segments(resource_id: str, events: List[TimedEvent]) -> List[ConflictSegment]:
    segments: List[ConflictSegment] = []

    # Sweep line; ends before starts at equal instants so touching is not a conflict.
    pts: List[Tuple[int, int, str]] = []
    for ev in events:
        pts.append((ev.start, +1, ev.id))
        pts.append((ev.end, -1, ev.id))
    pts.sort(key=lambda x: (x[0], x[1]))

    active: Set[str] = set()
    prev_t: Optional[int] = None

    for t, kind, appt_id in pts:
        if prev_t is not None and t > prev_t and len(active) >= 2:
            ids = tuple(sorted(active))
            last = segments[-1] if segments else None
            if last and last.ids == ids and last.end == prev_t:
                segments[-1] = ConflictSegment(
                    resource_id=resource_id, start=last.start, end=t, ids=ids, kind="overlap"
                )
            else:
                segments.append(ConflictSegment(resource_id=resource_id, start=prev_t, end=t, ids=ids, kind="overlap"))

        if kind == +1:
            active.add(appt_id)
        else:
            active.discard(appt_id)
        prev_t = t

    return segments


def detect_conflicts(appointments: Iterable[Appointment], cfg: GridConfig) -> List[ConflictSegment]:
    """Overlaps per resource plus the parts of appointments outside the grid window."""
    segments: List[ConflictSegment] = []
    window_end = cfg.window_minutes

    for rid, items in sorted(partition_by_resource(appointments).items()):
        events = to_timed_events(items, cfg)
        segments.extend(_overlap_segments(rid, events))

        for ev in events:
            if ev.start < 0:
                segments.append(
                    ConflictSegment(resource_id=rid, start=ev.start, end=min(ev.end, 0), ids=(ev.id,), kind="out_of_hours")
                )
            if ev.end > window_end:
                segments.append(
                    ConflictSegment(
                        resource_id=rid,
                        start=max(ev.start, window_end),
                        end=ev.end,
                        ids=(ev.id,),
                        kind="out_of_hours",
                    )
                )

    return segments


def _booked_minutes(events: List[TimedEvent], window_end: int) -> int:
    """Union length of the events clipped to [0, window_end)."""
    ints = []
    for ev in events:
        s = max(0, min(window_end, ev.start))
        e = max(0, min(window_end, ev.end))
        if e > s:
            ints.append((s, e))
    ints.sort()

    total = 0
    cur_s: Optional[int] = None
    cur_e = 0
    for s, e in ints:
        if cur_s is None or s > cur_e:
            if cur_s is not None:
                total += cur_e - cur_s
            cur_s, cur_e = s, e
        else:
            cur_e = max(cur_e, e)
    if cur_s is not None:
        total += cur_e - cur_s
    return total


def resource_load(appointments: Iterable[Appointment], cfg: GridConfig) -> Dict[str, ResourceLoad]:
    """Per resource: count, booked minutes (union), utilization of the grid window, peak concurrency."""
    window_end = cfg.window_minutes
    out: Dict[str, ResourceLoad] = {}
    for rid, items in partition_by_resource(appointments).items():
        events = to_timed_events(items, cfg)
        booked = _booked_minutes(events, window_end)
        out[rid] = ResourceLoad(
            resource_id=rid,
            count=len(events),
            booked_min=booked,
            utilization_pct=round(100.0 * booked / window_end, 1) if window_end > 0 else 0.0,
            peak_concurrency=max_concurrency(events),
        )
    return out


__all__ = [
    "detect_conflicts",
    "resource_load",
]
