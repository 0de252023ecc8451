"""Test environment: must run before any `app` module reads settings."""

import os

os.environ["APP_ENV"] = "dev"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-for-whiskers-tests-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
# TestClient talks plain http; secure cookies would never be sent back.
os.environ["COOKIE_SECURE"] = "false"
os.environ.pop("SMTP_HOST", None)
