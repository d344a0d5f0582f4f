import unittest

from reposync.models import ExecutionReport, OperationResult, Stage


class TestResults(unittest.TestCase):
    def test_operation_result_defaults(self) -> None:
        r = OperationResult(op_id="o1", seq=0, action="ADD", package="php-8.3.0", status="success")
        self.assertEqual(r.op_id, "o1")
        self.assertIsNone(r.error_type)
        self.assertIsNone(r.artifact_key)
        self.assertFalse(r.url_rewritten)

    def test_execution_report_defaults(self) -> None:
        r1 = OperationResult(op_id="o1", seq=0, action="ADD", package="p", status="success")
        report = ExecutionReport(status="success", stopped_op_id=None, results=[r1])
        self.assertEqual(report.status, "success")
        self.assertEqual(report.results[0].op_id, "o1")
        self.assertFalse(report.index_published)
        self.assertEqual(report.copied_keys, [])
        self.assertEqual(report.removal_failures, {})
        self.assertEqual(report.stages, [])
        self.assertEqual(report.summary, {})

    def test_reports_do_not_share_lists(self) -> None:
        a = ExecutionReport(status="success", stopped_op_id=None, results=[])
        b = ExecutionReport(status="success", stopped_op_id=None, results=[])
        a.copied_keys.append("x")
        self.assertEqual(b.copied_keys, [])

    def test_stage_order(self) -> None:
        self.assertEqual([s.value for s in Stage], ["TRANSFER", "INDEX", "CLEANUP"])


if __name__ == "__main__":
    unittest.main()
