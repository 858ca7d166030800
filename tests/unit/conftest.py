"""Minimal conftest for unit tests - no database."""

import os

# Set required env vars before any app imports
os.environ.setdefault("SECRET_KEY", "testsecretkey_for_unit_tests_only_1234567890")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
