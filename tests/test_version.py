import importlib.metadata
import io
import sys
import unittest
from unittest import mock

import askgate
from askgate.cli import app


class VersionTests(unittest.TestCase):
    def test_version_matches_metadata(self) -> None:
        meta_version = importlib.metadata.version("askgate")
        self.assertEqual(askgate.__version__, meta_version)

    def test_version_flag_skips_prompt(self) -> None:
        out = io.StringIO()
        with mock.patch.object(sys, "argv", ["askgate", "--version"]), mock.patch.object(
            app, "read_request"
        ) as read_mock, mock.patch.object(sys, "stdout", out):
            app.main()
        read_mock.assert_not_called()
        self.assertEqual(out.getvalue().strip(), f"askgate {askgate.__version__}")


if __name__ == "__main__":
    unittest.main()
