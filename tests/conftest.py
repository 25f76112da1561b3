"""Test configuration: select the test environment before anything loads config."""

import os
from pathlib import Path

os.environ["APP_ENVIRONMENT"] = "test"
os.environ.setdefault(
    "APP_CONFIG_FILE", str(Path(__file__).resolve().parent.parent / "config.yaml")
)
os.environ["TEST_DATABASE_URL"] = "sqlite://"
os.environ["TEST_DATABASE_CREATE_TABLES"] = "true"
os.environ["TEST_BCRYPT_SALT_ROUNDS"] = "4"
os.environ["TEST_RATE_LIMIT_ENABLED"] = "false"
os.environ["TEST_LOG_FILE"] = ""

from tests.fixtures import *  # noqa: E402,F401,F403
