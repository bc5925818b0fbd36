import json
import tempfile
import unittest
from pathlib import Path

from rich.console import Console

from askgate.config import AskgatePaths, ConfigManager


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.paths = AskgatePaths(Path(self._tmp.name))
        self.console = Console(record=True, force_terminal=False, color_system=None, width=200)
        self.manager = ConfigManager(self.paths, console=self.console)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write_config(self, data: object) -> None:
        self.paths.askgate_dir.mkdir(parents=True, exist_ok=True)
        self.paths.config_file.write_text(json.dumps(data), encoding="utf-8")

    def test_defaults_without_file(self) -> None:
        settings = self.manager.load_settings()
        self.assertEqual(settings.option_set, "extended")
        self.assertEqual(settings.project_folders, ("code", "projects", "repos"))
        self.assertIsNone(settings.debug)
        self.assertEqual(self.console.export_text(), "")

    def test_values_from_file(self) -> None:
        self._write_config(
            {"option_set": "basic", "project_folders": ["work", " src "], "debug": "session"}
        )
        settings = self.manager.load_settings()
        self.assertEqual(settings.option_set, "basic")
        self.assertEqual(settings.project_folders, ("work", "src"))
        self.assertEqual(settings.debug, "session")

    def test_invalid_values_warn_and_fall_back(self) -> None:
        self._write_config({"option_set": "everything", "project_folders": "code"})
        settings = self.manager.load_settings()
        self.assertEqual(settings.option_set, "extended")
        self.assertEqual(settings.project_folders, ("code", "projects", "repos"))
        output = self.console.export_text()
        self.assertIn("option_set", output)
        self.assertIn("project_folders", output)

    def test_non_string_option_set_falls_back(self) -> None:
        for value in (["basic"], {"name": "basic"}, 2):
            with self.subTest(value=value):
                self._write_config({"option_set": value})
                settings = self.manager.load_settings()
                self.assertEqual(settings.option_set, "extended")

    def test_oversized_integer_uses_defaults(self) -> None:
        self.paths.askgate_dir.mkdir(parents=True, exist_ok=True)
        self.paths.config_file.write_text('{"debug": ' + "9" * 5000 + "}", encoding="utf-8")
        settings = self.manager.load_settings()
        self.assertIsNone(settings.debug)
        self.assertIn("Failed to parse JSON config", self.console.export_text())

    def test_broken_json_uses_defaults(self) -> None:
        self.paths.askgate_dir.mkdir(parents=True, exist_ok=True)
        self.paths.config_file.write_text("{not json", encoding="utf-8")
        settings = self.manager.load_settings()
        self.assertEqual(settings.option_set, "extended")
        self.assertIn("Failed to parse JSON config", self.console.export_text())

    def test_non_object_config_ignored(self) -> None:
        self._write_config(["basic"])
        settings = self.manager.load_settings()
        self.assertEqual(settings.option_set, "extended")
        self.assertIn("expected a JSON object", self.console.export_text())

    def test_validate_reports_paths(self) -> None:
        errors = self.manager.validate({"project_folders": ["ok", 3]})
        self.assertEqual(len(errors), 1)
        self.assertTrue(errors[0].startswith("project_folders.1: "))


if __name__ == "__main__":
    unittest.main()
