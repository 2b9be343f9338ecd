import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from edublog.configs.settings import Settings
from edublog.main import create_app
from tests.support import make_settings


class TestSettings(unittest.TestCase):

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_database_url_is_rejected(self):
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, JWT_SECRET="secret")

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_jwt_secret_is_rejected(self):
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="sqlite://")

    @patch.dict(os.environ, {}, clear=True)
    def test_empty_jwt_secret_is_rejected(self):
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="sqlite://", JWT_SECRET="")

    @patch.dict(os.environ, {"DATABASE_URL": "sqlite://", "JWT_SECRET": "from-env", "PORT": "8080"}, clear=True)
    def test_reads_environment(self):
        settings = Settings(_env_file=None)
        self.assertEqual(settings.JWT_SECRET, "from-env")
        self.assertEqual(settings.PORT, 8080)
        self.assertEqual(settings.REFRESH_TOKEN_EXPIRE_DAYS, 30)

    def test_settings_are_immutable(self):
        settings = make_settings()
        with self.assertRaises(ValidationError):
            settings.JWT_SECRET = "changed"

    def test_app_factory_keeps_the_given_settings(self):
        settings = make_settings()
        app = create_app(settings)
        self.assertIs(app.state.settings, settings)
        self.assertIsNotNone(app.state.token_service)


if __name__ == "__main__":
    unittest.main()
