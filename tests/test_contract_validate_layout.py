from __future__ import annotations

import dataclasses
import datetime as dt
import unittest

from petgrid.layout import compute_layout
from petgrid.model import Appointment, GridConfig
from petgrid.validate import (
    AppointmentValidationError,
    LayoutValidationError,
    assert_valid_appointments,
    assert_valid_layout,
    validate_layout,
)

DAY = dt.date(2024, 5, 2)
CFG = GridConfig()


def _appt(appt_id: str, start: str, duration: int, day: dt.date = DAY) -> Appointment:
    return Appointment(id=appt_id, resource_id="r1", date=day, start_time=start, duration=duration)


class TestValidateLayoutContract(unittest.TestCase):
    def setUp(self) -> None:
        self.items = [_appt("a", "09:00", 60), _appt("b", "09:30", 30), _appt("c", "11:00", 30)]
        self.layout = compute_layout(self.items, CFG)

    def test_valid_layout_has_no_errors(self) -> None:
        self.assertEqual(validate_layout(self.items, self.layout, CFG), [])
        assert_valid_layout(self.items, self.layout, CFG)

    def test_dropped_and_duplicated_events_are_reported(self) -> None:
        errs = validate_layout(self.items, self.layout[:-1], CFG)
        self.assertTrue(any("appears 0 time(s)" in e for e in errs), errs)
        errs = validate_layout(self.items, self.layout + self.layout[:1], CFG)
        self.assertTrue(any("appears 2 time(s)" in e for e in errs), errs)

    def test_same_column_overlap_is_reported(self) -> None:
        broken = [dataclasses.replace(p, column_index=0) if p.id == "b" else p for p in self.layout]
        with self.assertRaises(LayoutValidationError):
            assert_valid_layout(self.items, broken, CFG)
        errs = validate_layout(self.items, broken, CFG)
        self.assertTrue(any("column 0 overlaps" in e for e in errs), errs)

    def test_extra_columns_are_reported(self) -> None:
        wide = [dataclasses.replace(p, column_count=3) if p.id in ("a", "b") else p for p in self.layout]
        errs = validate_layout(self.items, wide, CFG)
        self.assertTrue(any("column_count 3 != columns used 2" in e for e in errs), errs)

    def test_wrong_geometry_is_reported(self) -> None:
        moved = [dataclasses.replace(p, top=p.top + 5) if p.id == "c" else p for p in self.layout]
        errs = validate_layout(self.items, moved, CFG)
        self.assertTrue(any("'c' top" in e for e in errs), errs)

    def test_appointment_set_checks(self) -> None:
        assert_valid_appointments(self.items)
        with self.assertRaises(AppointmentValidationError):
            assert_valid_appointments(self.items + [_appt("a", "12:00", 15)])
        with self.assertRaises(AppointmentValidationError):
            assert_valid_appointments(self.items + [_appt("z", "12:00", 15, DAY + dt.timedelta(days=1))])


if __name__ == "__main__":
    unittest.main(verbosity=2)
