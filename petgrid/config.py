# petgrid/config.py
from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from .model import (
    DEFAULT_GRID_END_HOUR,
    DEFAULT_GRID_START_HOUR,
    DEFAULT_PIXELS_PER_HOUR,
    DEFAULT_SNAP_MINUTES,
    GridConfig,
)
from .util.console import obs
from .util.timeparse import parse_grid_hours

ENV_PX_PER_HOUR = "PETGRID_PX_PER_HOUR"
ENV_GRID_HOURS = "PETGRID_GRID_HOURS"
ENV_SNAP_MIN = "PETGRID_SNAP_MIN"
ENV_STORE = "PETGRID_STORE"


def _as_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    return None


def _as_number(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v)
    return None


def grid_config_from_mapping(cfg: Mapping[str, Any]) -> GridConfig:
    """Build a GridConfig from a dict (e.g. the "config" block of a day view).

    Missing keys take defaults; present keys with the wrong type or invalid
    values raise ValueError.
    """
    if not isinstance(cfg, Mapping):
        raise ValueError(f"grid config must be a mapping; got {type(cfg).__name__}")

    out = {}
    for key, conv in (
        ("pixels_per_hour", _as_number),
        ("grid_start_hour", _as_int),
        ("grid_end_hour", _as_int),
        ("snap_minutes", _as_int),
    ):
        if key not in cfg:
            continue
        val = conv(cfg[key])
        if val is None:
            raise ValueError(f"grid config {key} has invalid value {cfg[key]!r}")
        out[key] = val
    return GridConfig(**out)


def grid_config_from_env(environ: Optional[Mapping[str, str]] = None) -> GridConfig:
    """Read grid geometry from PETGRID_* env vars; bad values fall back to defaults."""
    env = os.environ if environ is None else environ

    pph = DEFAULT_PIXELS_PER_HOUR
    raw = (env.get(ENV_PX_PER_HOUR, "") or "").strip()
    if raw:
        try:
            v = float(raw)
            if v > 0:
                pph = v
            else:
                obs("config", f"WARN: {ENV_PX_PER_HOUR}={raw!r} must be positive; using {pph}")
        except ValueError:
            obs("config", f"WARN: invalid {ENV_PX_PER_HOUR}={raw!r}; using {pph}")

    start_h, end_h = DEFAULT_GRID_START_HOUR, DEFAULT_GRID_END_HOUR
    raw = (env.get(ENV_GRID_HOURS, "") or "").strip()
    if raw:
        try:
            start_h, end_h = parse_grid_hours(raw)
        except ValueError as e:
            obs("config", f"WARN: invalid {ENV_GRID_HOURS}={raw!r} ({e}); using {start_h:02d}-{end_h:02d}")

    snap = DEFAULT_SNAP_MINUTES
    raw = (env.get(ENV_SNAP_MIN, "") or "").strip()
    if raw:
        try:
            v = int(raw)
            if v >= 1:
                snap = v
            else:
                obs("config", f"WARN: {ENV_SNAP_MIN}={raw!r} must be >= 1; using {snap}")
        except ValueError:
            obs("config", f"WARN: invalid {ENV_SNAP_MIN}={raw!r}; using {snap}")

    return GridConfig(pixels_per_hour=pph, grid_start_hour=start_h, grid_end_hour=end_h, snap_minutes=snap)


def default_store_path(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    return (env.get(ENV_STORE, "") or "").strip() or "petgrid_store.json"


__all__ = [
    "ENV_GRID_HOURS",
    "ENV_PX_PER_HOUR",
    "ENV_SNAP_MIN",
    "ENV_STORE",
    "default_store_path",
    "grid_config_from_env",
    "grid_config_from_mapping",
]
