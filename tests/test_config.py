import logging
import os
import unittest

from config import logging_config
from config.config import Config


class TestConfig(unittest.TestCase):
    def test_config_defaults(self):
        self.assertEqual(Config.PRIMARY_ID, "AWS")
        self.assertEqual(Config.SECONDARY_ID, "GCP")
        self.assertEqual(Config.HEALTH_PATH, "/health")
        self.assertEqual(Config.ROOT_PATH, "/")
        self.assertEqual(Config.HEALTH_CONNECT_TIMEOUT, 5)
        self.assertEqual(Config.HEALTH_TOTAL_TIMEOUT, 10)
        self.assertEqual(Config.LOAD_TEST_CONNECT_TIMEOUT, 3)
        self.assertEqual(Config.LOAD_TEST_TOTAL_TIMEOUT, 5)
        self.assertEqual(Config.MONITOR_INTERVAL, 30)
        self.assertEqual(Config.LOAD_TEST_DELAY, 0.5)
        self.assertIsInstance(Config.LOAD_TEST_REQUESTS, int)
        self.assertEqual(Config.DNS_DOMAIN, "multicloud.local")

    def test_config_env_override(self):
        os.environ["AWS_IP"] = "198.51.100.7"
        os.environ["USE_DNS_ALIASES"] = "yes"
        # Reload config class
        import importlib

        import config.config as config_mod

        try:
            importlib.reload(config_mod)
            self.assertEqual(config_mod.Config.PRIMARY_HOST, "198.51.100.7")
            self.assertTrue(config_mod.Config.USE_DNS_ALIASES)
        finally:
            del os.environ["AWS_IP"]
            del os.environ["USE_DNS_ALIASES"]
            importlib.reload(config_mod)


class TestLoggingConfig(unittest.TestCase):
    def test_logging_setup(self):
        # Should not raise
        try:
            logging_config.setup_logging(force=True)
        except Exception as e:
            self.fail(f"setup_logging() raised {e}")
        logger = logging.getLogger()
        self.assertTrue(logger.hasHandlers())

    def test_set_level(self):
        root = logging.getLogger()
        previous = root.level
        try:
            logging_config.set_level("debug")
            self.assertEqual(root.level, logging.DEBUG)
        finally:
            root.setLevel(previous)
            for handler in root.handlers:
                handler.setLevel(previous)


if __name__ == "__main__":
    unittest.main()
