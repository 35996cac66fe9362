from __future__ import annotations

import argparse
import datetime as dt
import json
import os
import sys
from pathlib import Path
from typing import Optional

from .config import default_store_path, grid_config_from_env
from .model import GridConfig
from .schedule import build_day_view
from .store import JsonFileStore, StoreError
from .util.timeparse import parse_date_yyyy_mm_dd, parse_grid_hours


def add_grid_args(ap: argparse.ArgumentParser) -> None:
    env_cfg = grid_config_from_env()
    ap.add_argument(
        "--store",
        default=default_store_path(),
        help="Appointment store JSON (default: env PETGRID_STORE or ./petgrid_store.json)",
    )
    ap.add_argument(
        "--grid-hours",
        default=f"{env_cfg.grid_start_hour:02d}-{env_cfg.grid_end_hour:02d}",
        help="First and last displayable hour rows, e.g. 05-20 (default: env PETGRID_GRID_HOURS or 05-20)",
    )
    ap.add_argument(
        "--px-per-hour",
        type=float,
        default=env_cfg.pixels_per_hour,
        help="Vertical scale in pixels per hour (default: env PETGRID_PX_PER_HOUR or 80)",
    )
    ap.add_argument(
        "--snap",
        type=int,
        default=env_cfg.snap_minutes,
        help="Drop snap granularity in minutes (default: env PETGRID_SNAP_MIN or 15)",
    )


def grid_config_from_args(args: argparse.Namespace) -> GridConfig:
    try:
        start_h, end_h = parse_grid_hours(args.grid_hours)
        return GridConfig(
            pixels_per_hour=float(args.px_per_hour),
            grid_start_hour=start_h,
            grid_end_hour=end_h,
            snap_minutes=int(args.snap),
        )
    except ValueError as e:
        raise SystemExit(f"Invalid grid configuration: {e}")


def open_store(path: str) -> JsonFileStore:
    try:
        return JsonFileStore(path)
    except StoreError as e:
        raise SystemExit(str(e))


def write_json(obj: object, out: str) -> Optional[str]:
    text = json.dumps(obj, ensure_ascii=False, indent=2) + "\n"
    if out == "-":
        sys.stdout.write(text)
        return None
    out_path = os.path.abspath(out)
    try:
        Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise SystemExit(f"Cannot create output directory '{Path(out_path).parent}': {e}")
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(text)
    return out_path


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="petgrid",
        description="Compute the side-by-side day-grid layout of a clinic's appointments per resource.",
    )
    ap.add_argument("--date", default=None, help="Day to lay out, YYYY-MM-DD (default: today)")
    ap.add_argument(
        "--filter",
        default="all",
        help="Resource type filter; 'all' keeps every resource (default: all)",
    )
    ap.add_argument("--out", default="-", help="Output JSON path, or '-' for stdout (default: -)")
    add_grid_args(ap)

    args = ap.parse_args(argv)

    if args.date:
        try:
            day = parse_date_yyyy_mm_dd(args.date)
        except ValueError as e:
            raise SystemExit(f"Invalid --date value: {e}")
    else:
        day = dt.date.today()

    cfg = grid_config_from_args(args)
    store = open_store(args.store)
    if not store.path.exists():
        print(f"[petgrid] WARN: store {store.path} does not exist; laying out an empty day", file=sys.stderr)

    view = build_day_view(
        store.list_appointments(day=day),
        store.list_resources(),
        day,
        cfg,
        type_filter=args.filter,
    )
    out_path = write_json(view, args.out)
    if out_path:
        print(out_path)


if __name__ == "__main__":
    main()
