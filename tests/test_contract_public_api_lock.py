from __future__ import annotations

import unittest


class TestPublicApiLockContract(unittest.TestCase):
    def test_api_module_exports_are_present(self) -> None:
        import petgrid.api as api

        self.assertTrue(hasattr(api, "__all__"))
        self.assertIsInstance(api.__all__, (list, tuple))
        self.assertEqual(len(api.__all__), len(set(api.__all__)))
        self.assertEqual(list(api.__all__), sorted(api.__all__))

        for name in api.__all__:
            self.assertIsInstance(name, str)
            self.assertTrue(hasattr(api, name), f"petgrid.api missing public name: {name}")
            self.assertIsNotNone(getattr(api, name), f"petgrid.api {name} is None")

    def test_package_reexports_match_api_all(self) -> None:
        import petgrid
        import petgrid.api as api

        for name in api.__all__:
            self.assertTrue(hasattr(petgrid, name), f"petgrid package does not re-export: {name}")
            self.assertIs(getattr(petgrid, name), getattr(api, name), f"petgrid.{name} must be same object as petgrid.api.{name}")

    def test_entry_points_are_exported(self) -> None:
        import petgrid

        for name in ("compute_layout", "pixel_offset_to_time"):
            self.assertIn(name, petgrid.__all__)

    def test_appointments_from_rows_skips_malformed(self) -> None:
        import petgrid

        rows = [
            {"id": "a", "resource_id": "r1", "start_time": "2024-05-02T09:00:00", "duration": 30},
            {"id": "b", "resource_id": "r1", "start_time": "2024-05-02T09:00:00", "duration": -5},
            "not a row",
        ]
        out = petgrid.appointments_from_rows(rows)  # type: ignore[arg-type]
        self.assertEqual([a.id for a in out], ["a"])
        self.assertEqual(len(petgrid.compute_layout(out, petgrid.GridConfig())), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
