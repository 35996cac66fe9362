from __future__ import annotations

import datetime as dt
import itertools
import random
import unittest

from petgrid.layout import (
    assign_columns,
    compute_layout,
    group_overlaps,
    layout_by_resource,
    max_concurrency,
    to_timed_events,
)
from petgrid.model import Appointment, GridConfig
from petgrid.validate import validate_layout

DAY = dt.date(2024, 5, 2)
CFG = GridConfig(pixels_per_hour=80, grid_start_hour=5, grid_end_hour=20, snap_minutes=15)


def _appt(appt_id: str, start: str, duration: int, resource: str = "r1") -> Appointment:
    return Appointment(id=appt_id, resource_id=resource, date=DAY, start_time=start, duration=duration)


def _by_id(positioned) -> dict:
    return {p.id: p for p in positioned}


class TestLayoutPackingContract(unittest.TestCase):
    def test_empty_input_is_empty_output(self) -> None:
        self.assertEqual(compute_layout([], CFG), [])
        self.assertEqual(layout_by_resource([], CFG), {})

    def test_single_appointment_full_width(self) -> None:
        out = compute_layout([_appt("a", "09:00", 60)], CFG)
        self.assertEqual(len(out), 1)
        p = out[0]
        self.assertEqual((p.column_index, p.column_count), (0, 1))
        self.assertEqual(p.width_percent, 100.0)
        self.assertEqual(p.left_percent, 0.0)
        # 09:00 on a 05:00 grid at 80px/h.
        self.assertEqual(p.start, 240)
        self.assertEqual(p.end, 300)
        self.assertAlmostEqual(p.top, 320.0)
        self.assertAlmostEqual(p.height, 80.0)

    def test_two_overlapping_side_by_side(self) -> None:
        out = _by_id(compute_layout([_appt("b", "09:30", 30), _appt("a", "09:00", 60)], CFG))
        self.assertEqual((out["a"].column_index, out["a"].column_count), (0, 2))
        self.assertEqual((out["b"].column_index, out["b"].column_count), (1, 2))
        self.assertEqual(out["b"].width_percent, 50.0)
        self.assertEqual(out["b"].left_percent, 50.0)
        self.assertEqual(out["a"].group_index, out["b"].group_index)

    def test_short_events_reuse_column_inside_long_anchor(self) -> None:
        out = _by_id(
            compute_layout([_appt("a", "09:00", 60), _appt("b", "09:15", 15), _appt("c", "09:45", 15)], CFG)
        )
        self.assertEqual(out["a"].column_index, 0)
        self.assertEqual(out["b"].column_index, 1)
        self.assertEqual(out["c"].column_index, 1)
        for p in out.values():
            self.assertEqual(p.column_count, 2)

    def test_back_to_back_is_not_overlap(self) -> None:
        out = _by_id(compute_layout([_appt("a", "09:00", 60), _appt("b", "10:00", 30)], CFG))
        self.assertEqual(out["a"].column_count, 1)
        self.assertEqual(out["b"].column_count, 1)
        self.assertEqual(out["a"].column_index, 0)
        self.assertEqual(out["b"].column_index, 0)
        self.assertNotEqual(out["a"].group_index, out["b"].group_index)

    def test_equal_start_longer_duration_anchors_column_zero(self) -> None:
        out = _by_id(
            compute_layout([_appt("short", "09:00", 15), _appt("long", "09:00", 120), _appt("mid", "09:00", 45)], CFG)
        )
        self.assertEqual(out["long"].column_index, 0)
        self.assertEqual(out["mid"].column_index, 1)
        self.assertEqual(out["short"].column_index, 2)

    def test_chain_grouping_shares_width_without_clique(self) -> None:
        # a and c never overlap directly but both overlap b -> one group.
        events = to_timed_events([_appt("a", "09:00", 60), _appt("b", "09:30", 60), _appt("c", "10:15", 30)], CFG)
        groups = group_overlaps(events)
        self.assertEqual(len(groups), 1)
        self.assertEqual(assign_columns(groups[0]), [0, 1, 0])

    def test_group_close_is_strict_and_column_fit_is_inclusive(self) -> None:
        # b starts exactly at a.end but c keeps the group open, so b reuses a's column.
        out = _by_id(
            compute_layout([_appt("a", "09:00", 30), _appt("c", "09:00", 90), _appt("b", "09:30", 30)], CFG)
        )
        self.assertEqual(out["c"].column_index, 0)
        self.assertEqual(out["a"].column_index, 1)
        self.assertEqual(out["b"].column_index, 1)
        self.assertEqual(out["b"].column_count, 2)

    def test_appointment_before_grid_start_gets_negative_top(self) -> None:
        out = compute_layout([_appt("early", "04:30", 60)], CFG)
        self.assertEqual(out[0].start, -30)
        self.assertAlmostEqual(out[0].top, -40.0)

    def test_order_independence_over_permutations(self) -> None:
        items = [
            _appt("a", "09:00", 60),
            _appt("b", "09:00", 60),
            _appt("c", "09:15", 30),
            _appt("d", "09:30", 15),
            _appt("e", "10:00", 30),
        ]
        ref = {p.id: (p.group_index, p.column_index, p.column_count) for p in compute_layout(items, CFG)}
        for perm in itertools.permutations(items):
            got = {p.id: (p.group_index, p.column_index, p.column_count) for p in compute_layout(list(perm), CFG)}
            self.assertEqual(got, ref)

    def test_layout_by_resource_partitions_columns(self) -> None:
        out = layout_by_resource(
            [_appt("a", "09:00", 60, "r1"), _appt("b", "09:00", 60, "r2"), _appt("c", "09:30", 60, "r1")],
            CFG,
        )
        self.assertEqual(sorted(out), ["r1", "r2"])
        self.assertEqual({p.id: p.column_count for p in out["r1"]}, {"a": 2, "c": 2})
        self.assertEqual(out["r2"][0].column_count, 1)

    def test_max_concurrency_ignores_touching(self) -> None:
        events = to_timed_events([_appt("a", "09:00", 60), _appt("b", "10:00", 60), _appt("c", "09:30", 60)], CFG)
        self.assertEqual(max_concurrency(events), 2)
        self.assertEqual(max_concurrency([]), 0)

    def test_randomized_invariants(self) -> None:
        rng = random.Random(1337)
        for _ in range(200):
            n = rng.randint(0, 14)
            items = []
            for i in range(n):
                h = rng.randint(5, 19)
                m = rng.choice([0, 5, 15, 20, 30, 45, 50])
                items.append(
                    _appt(f"x{i}", f"{h:02d}:{m:02d}", rng.choice([10, 15, 30, 45, 60, 90, 120]), rng.choice(["r1", "r2"]))
                )

            positioned = [p for evs in layout_by_resource(items, CFG).values() for p in evs]
            self.assertEqual(validate_layout(items, positioned, CFG), [])

            shuffled = list(items)
            rng.shuffle(shuffled)
            again = [p for evs in layout_by_resource(shuffled, CFG).values() for p in evs]
            self.assertEqual(
                sorted((p.id, p.column_index, p.column_count, p.top, p.height) for p in positioned),
                sorted((p.id, p.column_index, p.column_count, p.top, p.height) for p in again),
            )


if __name__ == "__main__":
    unittest.main(verbosity=2)
