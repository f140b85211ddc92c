import unittest

from app.config import Settings
from app.exceptions import ConfigurationError


class TestSettings(unittest.TestCase):

    def test_defaults(self):
        settings = Settings(database_url="postgresql+asyncpg://db/app", service_role_key="key")
        self.assertEqual(settings.overdue_threshold_minutes, 15)
        self.assertEqual(settings.system_actor, "system")
        settings.require_persistence()

    def test_missing_credentials_fail_fast(self):
        settings = Settings(database_url="postgresql+asyncpg://db/app", service_role_key=None)
        with self.assertRaises(ConfigurationError) as ctx:
            settings.require_persistence()
        self.assertIn("SERVICE_ROLE_KEY", ctx.exception.message)
        self.assertEqual(ConfigurationError.public_message, "Server configuration error")


if __name__ == "__main__":
    unittest.main()
