# petgrid/dropmap.py
"""Drop-target math: pixel offset within a resource column -> wall-clock slot."""

from __future__ import annotations

import math
from typing import Union

from .model import Appointment, DropRejected, GridConfig, Reschedule, SlotTime
from .util.console import obs
from .util.timeparse import parse_hhmm


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def pixel_offset_to_time(offset_y: float, cfg: GridConfig) -> Union[SlotTime, DropRejected]:
    """Map `offset_y` (px from the grid's top edge) to a snapped slot.

    The hour is never clamped: a slot outside
    [grid_start_hour, grid_end_hour] comes back as DropRejected.
    """
    total_min = (float(offset_y) / float(cfg.pixels_per_hour)) * 60.0
    hours_offset = int(math.floor(total_min / 60.0))
    # Remainder keeps the sign of total_min, so offsets above the grid never
    # round up into the first hour row.
    remainder = math.fmod(total_min, 60.0)

    snap = int(cfg.snap_minutes)
    minute = _round_half_up(remainder / snap) * snap
    if minute >= 60:
        minute = 0
        hours_offset += 1

    hour = int(cfg.grid_start_hour) + hours_offset
    if hour < cfg.grid_start_hour:
        return DropRejected(reason="before_grid_start", hour=hour, minute=minute)
    if hour > cfg.grid_end_hour:
        return DropRejected(reason="after_grid_end", hour=hour, minute=minute)
    return SlotTime(hour=hour, minute=minute)


def time_to_pixel_offset(start_time: str, cfg: GridConfig) -> float:
    hh, mm = parse_hhmm(start_time)
    minutes = (hh - int(cfg.grid_start_hour)) * 60 + mm
    return (minutes / 60.0) * float(cfg.pixels_per_hour)


def resolve_drop(
    appt: Appointment,
    offset_y: float,
    target_resource_id: str,
    cfg: GridConfig,
) -> Union[Reschedule, DropRejected]:
    slot = pixel_offset_to_time(offset_y, cfg)
    if isinstance(slot, DropRejected):
        obs(
            "dropmap",
            f"drop.rejected id={appt.id!r} offset_y={offset_y} reason={slot.reason} "
            f"hour={slot.hour} minute={slot.minute}",
        )
        return slot
    return Reschedule(
        appointment_id=appt.id,
        resource_id=str(target_resource_id),
        start_time=slot.hhmm,
        slot=slot,
    )


__all__ = [
    "pixel_offset_to_time",
    "resolve_drop",
    "time_to_pixel_offset",
]
