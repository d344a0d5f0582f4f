import unittest
from datetime import datetime, timezone

from reposync.util.time import normalize_dt, now_utc, parse_manifest_time


class TestUtilTime(unittest.TestCase):
    def test_now_utc_is_tz_aware(self) -> None:
        dt = now_utc()
        self.assertIsNotNone(dt.tzinfo)
        self.assertEqual(dt.tzinfo, timezone.utc)

    def test_normalize_dt_rejects_naive(self) -> None:
        naive = datetime(2025, 1, 1, 12, 0, 0)
        with self.assertRaises(ValueError):
            normalize_dt(naive)

    def test_normalize_dt_rejects_non_datetime(self) -> None:
        with self.assertRaises(TypeError):
            normalize_dt("2025-01-01 12:00:00")  # type: ignore[arg-type]

    def test_parse_manifest_time_is_utc(self) -> None:
        dt = parse_manifest_time("2025-01-01 12:34:56")
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, tzinfo=timezone.utc))

    def test_parse_manifest_time_rejects_other_formats(self) -> None:
        for value in ("2025-01-01T12:34:56Z", "2025-01-01", "yesterday", ""):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_manifest_time(value)

    def test_parse_manifest_time_rejects_non_string(self) -> None:
        with self.assertRaises(ValueError):
            parse_manifest_time(None)  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            parse_manifest_time(1735689600)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
