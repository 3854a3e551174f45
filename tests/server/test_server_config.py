import sys
import tempfile
import types
import unittest
from pathlib import Path

from app_config_schema import UIServerSettings

# Import server.config without executing src/server/__init__.py.
_SERVER_DIR = Path(__file__).resolve().parents[2] / "src" / "server"
if "server" not in sys.modules:
    _pkg = types.ModuleType("server")
    _pkg.__path__ = [str(_SERVER_DIR)]  # type: ignore[attr-defined]
    sys.modules["server"] = _pkg

from server.config import ServerConfigurationError, UIServerConfig


class UIServerConfigTests(unittest.TestCase):
    def test_from_settings_uses_builtin_button_ui(self) -> None:
        settings = UIServerSettings(
            enabled=True,
            host="127.0.0.1",
            port=8765,
            ui="button",
            index_file="",
        )

        config = UIServerConfig.from_settings(settings)

        self.assertEqual("button", config.ui)
        self.assertEqual(
            ("web_ui", "button", "index.html"),
            Path(config.index_file).parts[-3:],
        )
        self.assertTrue(Path(config.index_file).is_file())
        self.assertEqual(Path(config.index_file).resolve().parent, config.ui_root)

    def test_from_settings_rejects_unknown_ui(self) -> None:
        settings = UIServerSettings(
            enabled=True,
            host="127.0.0.1",
            port=8765,
            ui="retro",
            index_file="",
        )

        with self.assertRaises(ServerConfigurationError):
            UIServerConfig.from_settings(settings)

    def test_from_settings_prefers_explicit_index_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            custom = Path(temp_dir) / "index.html"
            custom.write_text("<html></html>", encoding="utf-8")

            settings = UIServerSettings(
                enabled=True,
                host="127.0.0.1",
                port=8765,
                ui="button",
                index_file=str(custom),
            )

            config = UIServerConfig.from_settings(settings)
            self.assertEqual(str(custom), config.index_file)

    def test_rejects_invalid_port_and_host(self) -> None:
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(enabled=False, port=0)
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(enabled=False, host="  ")

    def test_disabled_server_skips_index_validation(self) -> None:
        config = UIServerConfig(enabled=False, index_file="/does/not/exist.html")
        self.assertFalse(config.enabled)

    def test_enabled_server_requires_existing_index(self) -> None:
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(enabled=True, index_file="/does/not/exist.html")


if __name__ == "__main__":
    unittest.main()
