import os
import unittest
from unittest.mock import patch

import trmm_manager.config as config


class ConfigBehaviorTests(unittest.TestCase):
    def tearDown(self):
        config.reload_from_env()

    def test_reload_from_env_updates_runtime_values(self):
        """Validate scenario: reload picks up debug, timeout, TLS and data dir."""
        env = {
            "TRMM_DEBUG": "1",
            "TRMM_CONSOLE": "1",
            "TRMM_REQUEST_TIMEOUT_S": "12.5",
            "TRMM_VERIFY_TLS": "0",
            "TRMM_DATA_DIR": os.path.join(os.sep, "tmp", "trmm-test"),
        }
        with patch.dict(os.environ, env, clear=False):
            os.environ.pop("TRMM_CA_BUNDLE", None)
            config.reload_from_env()
            self.assertTrue(config.DEBUG)
            self.assertTrue(config.CONSOLE_LOG)
            self.assertTrue(config.LOG_ENABLED)
            self.assertEqual(config.REQUEST_TIMEOUT_S, 12.5)
            self.assertFalse(config.VERIFY_TLS)
            self.assertEqual(config.PROFILE_DB_FILE, os.path.join(config.DATA_DIR, "profiles.db"))
            self.assertTrue(config.DATA_DIR.endswith("trmm-test"))

    def test_invalid_timeout_falls_back_to_default(self):
        """Validate scenario: non-numeric or non-positive timeouts use the default."""
        for raw in ("abc", "-3", "0"):
            with self.subTest(raw=raw), patch.dict(os.environ, {"TRMM_REQUEST_TIMEOUT_S": raw}):
                config.reload_from_env()
                self.assertEqual(config.REQUEST_TIMEOUT_S, config.DEFAULT_REQUEST_TIMEOUT_S)

    def test_ca_bundle_overrides_verify_flag(self):
        """Validate scenario: a CA bundle path is used as the verify value."""
        with patch.dict(os.environ, {"TRMM_CA_BUNDLE": "/etc/ssl/ca.pem", "TRMM_VERIFY_TLS": "0"}):
            config.reload_from_env()
            self.assertEqual(config.VERIFY_TLS, "/etc/ssl/ca.pem")

    def test_client_config_snapshots_module_values(self):
        """Validate scenario: ClientConfig.from_env copies the current settings."""
        with patch.dict(os.environ, {"TRMM_REQUEST_TIMEOUT_S": "9"}):
            config.reload_from_env()
            snapshot = config.ClientConfig.from_env()
        self.assertEqual(snapshot.timeout_s, 9.0)
        self.assertEqual(snapshot.api_key_header, "X-API-KEY")

    def test_user_config_dir_honours_xdg(self):
        """Validate scenario: XDG_CONFIG_HOME is used on Linux."""
        with patch.object(config.sys, "platform", "linux"), patch.dict(os.environ, {"XDG_CONFIG_HOME": "/xdg"}):
            self.assertEqual(config.user_config_dir(), os.path.join("/xdg", config.APP_NAME))


if __name__ == "__main__":
    unittest.main()
