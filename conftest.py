"""Global pytest configuration."""

import os

# Settings are read at import time, so these must be set before docmanager is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SEED_DEV_DATA", "false")
os.environ.setdefault("MAX_UPLOAD_MB", "1")
