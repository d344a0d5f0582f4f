import unittest

import reposync


class TestPublicApi(unittest.TestCase):
    def test_top_level_exports_exist(self) -> None:
        self.assertTrue(hasattr(reposync, "RepoSyncManager"))
        self.assertTrue(hasattr(reposync, "S3Controller"))
        self.assertTrue(hasattr(reposync, "RepoLocation"))
        self.assertTrue(hasattr(reposync, "SyncSettings"))

        self.assertTrue(hasattr(reposync, "extract_key"))
        self.assertTrue(hasattr(reposync, "rewrite_url"))
        self.assertTrue(hasattr(reposync, "build_plan"))
        self.assertTrue(hasattr(reposync, "build_index"))

        self.assertTrue(hasattr(reposync, "Action"))
        self.assertTrue(hasattr(reposync, "SyncPlan"))
        self.assertTrue(hasattr(reposync, "ExecutionReport"))

        self.assertTrue(hasattr(reposync, "RepoSyncError"))
        self.assertTrue(hasattr(reposync, "InvalidStateError"))

    def test___all___is_defined(self) -> None:
        self.assertTrue(hasattr(reposync, "__all__"))
        self.assertIn("RepoSyncManager", reposync.__all__)
        self.assertIn("RepoSyncError", reposync.__all__)
        for name in reposync.__all__:
            with self.subTest(name=name):
                self.assertTrue(hasattr(reposync, name))


if __name__ == "__main__":
    unittest.main()
