#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from typing import List

from petgrid.cli import add_grid_args, grid_config_from_args, open_store
from petgrid.dropmap import resolve_drop
from petgrid.model import DropRejected
from petgrid.schedule import apply_drop
from petgrid.store import StoreError


def _die(msg: str, rc: int = 2) -> int:
    print(f"[petgrid-drop] ERROR: {msg}", file=sys.stderr)
    return rc


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="petgrid-drop",
        description=(
            "Apply a drag-and-drop onto the day grid: map the drop's pixel offset to a snapped\n"
            "start time and move the appointment to the target resource.\n"
            "Drops outside the grid's hours are rejected and nothing is written."
        ),
    )
    ap.add_argument("--id", required=True, help="Appointment id being dragged")
    ap.add_argument("--resource", required=True, help="Target resource id (the column it was dropped on)")
    ap.add_argument("--offset-y", type=float, required=True, help="Drop offset in px from the grid's top edge")
    ap.add_argument("--dry-run", action="store_true", help="Resolve the drop but do not write to the store")
    add_grid_args(ap)
    ns = ap.parse_args(argv)

    cfg = grid_config_from_args(ns)
    store = open_store(ns.store)

    if ns.dry_run:
        appt = store.get_appointment(ns.id)
        if appt is None:
            return _die(f"Unknown appointment id: {ns.id}")
        res = resolve_drop(appt, ns.offset_y, ns.resource, cfg)
    else:
        try:
            res = apply_drop(store, ns.id, ns.offset_y, ns.resource, cfg)
        except KeyError:
            return _die(f"Unknown appointment id: {ns.id}")
        except (StoreError, ValueError) as e:
            return _die(f"Failed to update appointment {ns.id}: {e}")

    if isinstance(res, DropRejected):
        print(
            f"[petgrid-drop] REJECTED: {res.hour:02d}:{res.minute:02d} is outside "
            f"{cfg.grid_start_hour:02d}:00-{cfg.grid_end_hour:02d}:59 ({res.reason})",
            file=sys.stderr,
        )
        return 3

    print(
        json.dumps(
            {
                "id": res.appointment_id,
                "resource_id": res.resource_id,
                "start_time": res.start_time,
                "written": not ns.dry_run,
            },
            ensure_ascii=False,
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
