#!/usr/bin/env python3
from __future__ import annotations

import argparse
import datetime as dt
import sys
from typing import List

from petgrid.cli import open_store, write_json
from petgrid.config import default_store_path
from petgrid.schedule import month_grid


def _parse_month(s: str) -> tuple[int, int]:
    try:
        d = dt.datetime.strptime(s.strip(), "%Y-%m")
    except ValueError:
        raise ValueError(f"month must be like 2024-05; got {s!r}")
    return d.year, d.month


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="petgrid-month",
        description="Emit the six-week month grid (Sunday first) with each day's appointments.",
    )
    ap.add_argument("--month", default=None, help="Month YYYY-MM (default: current month)")
    ap.add_argument("--store", default=default_store_path(), help="Appointment store JSON")
    ap.add_argument("--out", default="-", help="Output JSON path, or '-' for stdout (default: -)")
    ns = ap.parse_args(argv)

    today = dt.date.today()
    if ns.month:
        try:
            year, month = _parse_month(ns.month)
        except ValueError as e:
            print(f"[petgrid-month] ERROR: {e}", file=sys.stderr)
            return 2
    else:
        year, month = today.year, today.month

    store = open_store(ns.store)
    cells = month_grid(year, month, store.list_appointments(), today=today)
    out_path = write_json(
        {
            "month": f"{year:04d}-{month:02d}",
            "cells": [c.to_dict() for c in cells],
        },
        ns.out,
    )
    if out_path:
        print(out_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
