#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from typing import List

from petgrid.cli import add_grid_args, grid_config_from_args, open_store
from petgrid.layout import layout_by_resource
from petgrid.util.timeparse import parse_date_yyyy_mm_dd
from petgrid.validate import validate_appointments, validate_layout


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="petgrid-check",
        description=(
            "Recompute the layout for each stored day and check the packing invariants:\n"
            "coverage, no overlap within a column, column count bounded by peak concurrency."
        ),
    )
    ap.add_argument("--date", action="append", default=[], help="Only check this day (repeatable)")
    add_grid_args(ap)
    ns = ap.parse_args(argv)

    cfg = grid_config_from_args(ns)
    store = open_store(ns.store)

    try:
        only = {parse_date_yyyy_mm_dd(d) for d in ns.date}
    except ValueError as e:
        print(f"[petgrid-check] ERROR: invalid --date: {e}", file=sys.stderr)
        return 2

    by_day: dict = {}
    for a in store.list_appointments():
        if only and a.date not in only:
            continue
        by_day.setdefault(a.date, []).append(a)

    all_errs: List[str] = []
    for day, items in sorted(by_day.items()):
        label = day.isoformat()
        errs = validate_appointments(items, label=label)
        if not errs:
            positioned = [p for evs in layout_by_resource(items, cfg).values() for p in evs]
            errs = validate_layout(items, positioned, cfg, label=label)
        all_errs.extend(errs)

    if all_errs:
        print("[petgrid-check] FAIL", file=sys.stderr)
        for e in all_errs:
            print(f"  - {e}", file=sys.stderr)
        return 3

    print(f"[petgrid-check] OK days={len(by_day)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
