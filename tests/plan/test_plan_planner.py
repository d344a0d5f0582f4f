import unittest
from datetime import datetime, timedelta, timezone

from reposync.config import RepoLocation
from reposync.errors import InvalidArgumentError
from reposync.models import ManifestRecord
from reposync.plan import Action, build_plan
from reposync.plan.planner import REASON_DIFFER_DEST_NEWER, REASON_DIFFER_SAME_TIME
from reposync.repo import ManifestSet

SRC = RepoLocation("src-bucket", "dist/", "s3.us-east-1")
DST = RepoLocation("dst-bucket", "stable/", "s3.us-east-1")
T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
T1 = T0 + timedelta(days=1)


def _record(loc: RepoLocation, name: str, time: datetime = T0, version: str = "1", substituted=False):
    data = {
        "name": f"heroku-sys/{name}",
        "version": version,
        "dist": {"type": "heroku-sys-tar", "url": f"{loc.url}{name}.tar.gz"},
    }
    return ManifestRecord(
        name=name,
        key=f"{name}.composer.json",
        data=data,
        raw=b"{}",
        time=time,
        time_substituted=substituted,
    )


def _set(loc: RepoLocation, *records: ManifestRecord) -> ManifestSet:
    return ManifestSet.from_records(loc, records)


class TestBuildPlan(unittest.TestCase):
    def test_add_to_empty_destination(self) -> None:
        plan = build_plan(_set(SRC, _record(SRC, "a"), _record(SRC, "b")), _set(DST))
        self.assertEqual(plan.adds, ["a", "b"])
        self.assertEqual(plan.updates, [])
        self.assertEqual(plan.removes, [])
        self.assertTrue(plan.has_changes)

    def test_update_when_source_newer(self) -> None:
        plan = build_plan(
            _set(SRC, _record(SRC, "a", T1, version="2")),
            _set(DST, _record(DST, "a", T0)),
        )
        self.assertEqual(plan.updates, ["a"])
        self.assertEqual(plan.up_to_date, ())

    def test_destination_newer_is_ignored(self) -> None:
        plan = build_plan(
            _set(SRC, _record(SRC, "a", T0)),
            _set(DST, _record(DST, "a", T1, version="2")),
        )
        self.assertEqual(plan.adds + plan.updates + plan.removes, [])
        self.assertEqual([(op.package, op.reason) for op in plan.ignores], [("a", REASON_DIFFER_DEST_NEWER)])
        self.assertFalse(plan.has_changes)

    def test_same_time_different_content_is_ignored(self) -> None:
        plan = build_plan(
            _set(SRC, _record(SRC, "a", T0, version="1")),
            _set(DST, _record(DST, "a", T0, version="2")),
        )
        self.assertEqual([op.reason for op in plan.ignores], [REASON_DIFFER_SAME_TIME])

    def test_up_to_date_has_no_operation(self) -> None:
        plan = build_plan(_set(SRC, _record(SRC, "a")), _set(DST, _record(DST, "a")))
        self.assertEqual(plan.operations, ())
        self.assertEqual(plan.up_to_date, ("a",))
        self.assertFalse(plan.has_changes)

    def test_remove_missing_from_source(self) -> None:
        plan = build_plan(
            _set(SRC, _record(SRC, "a")),
            _set(DST, _record(DST, "a"), _record(DST, "old")),
        )
        self.assertEqual(plan.removes, ["old"])

    def test_every_package_classified_once(self) -> None:
        source = _set(
            SRC,
            _record(SRC, "new"),
            _record(SRC, "newer", T1, version="2"),
            _record(SRC, "same"),
            _record(SRC, "stale", T0),
        )
        destination = _set(
            DST,
            _record(DST, "newer", T0),
            _record(DST, "same"),
            _record(DST, "stale", T1, version="9"),
            _record(DST, "gone"),
        )
        plan = build_plan(source, destination)

        packages = [op.package for op in plan.operations] + list(plan.up_to_date)
        self.assertEqual(sorted(packages), ["gone", "new", "newer", "same", "stale"])
        self.assertEqual(len(packages), len(set(packages)))
        self.assertEqual(
            [(op.seq, op.action, op.package) for op in plan.operations],
            [
                (0, Action.ADD, "new"),
                (1, Action.UPDATE, "newer"),
                (2, Action.REMOVE, "gone"),
                (3, Action.IGNORE, "stale"),
            ],
        )

    def test_apply_order_transfers_then_removals(self) -> None:
        plan = build_plan(
            _set(SRC, _record(SRC, "z-new")),
            _set(DST, _record(DST, "a-old")),
        )
        ops = {op.op_id: op for op in plan.operations}
        self.assertEqual([ops[i].action for i in plan.apply_order], [Action.ADD, Action.REMOVE])

    def test_deterministic(self) -> None:
        source = _set(SRC, _record(SRC, "b"), _record(SRC, "a"), _record(SRC, "c", T0))
        destination = _set(DST, _record(DST, "d"), _record(DST, "c", T1, version="2"))

        def _shape(plan):
            return [(op.seq, op.action, op.package, op.reason) for op in plan.operations]

        first = build_plan(source, destination)
        second = build_plan(source, destination)
        self.assertNotEqual(first.plan_id, second.plan_id)
        self.assertEqual(_shape(first), _shape(second))

    def test_time_substitution_warnings(self) -> None:
        plan = build_plan(
            _set(SRC, _record(SRC, "a", substituted=True)),
            _set(DST, _record(DST, "b", substituted=True)),
        )
        self.assertEqual(
            list(plan.warnings),
            [
                "source manifest a has invalid time entry, using mtime",
                "destination manifest b has invalid time entry, using mtime",
            ],
        )

    def test_same_repository_rejected(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            build_plan(_set(SRC, _record(SRC, "a")), _set(SRC))

        other_region = RepoLocation(SRC.bucket, SRC.prefix, "s3.us-west-1")
        with self.assertRaises(InvalidArgumentError):
            build_plan(_set(SRC, _record(SRC, "a")), _set(other_region))


if __name__ == "__main__":
    unittest.main()
