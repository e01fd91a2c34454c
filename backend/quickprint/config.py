# backend/quickprint/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key (also signs file URLs)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/quickprint.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///quickprint.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Uploaded documents (relative paths live in the instance folder)
    STORAGE_DIR = os.environ.get("QUICKPRINT_STORAGE_DIR", "documents")
    FILE_URL_TTL_SECONDS = int(os.environ.get("QUICKPRINT_FILE_URL_TTL", "3600"))
    MAX_CONTENT_LENGTH = 100 * 1024 * 1024  # 100 MB uploads

    # Calendar day boundaries for "today" and EOD
    SHOP_TIMEZONE = os.environ.get("QUICKPRINT_SHOP_TIMEZONE", "UTC")

    # Pricing overrides; unset keys fall back to pricing_service constants
    BW_RATE_CENTS = os.environ.get("QUICKPRINT_BW_RATE_CENTS")
    COLOR_RATE_CENTS = os.environ.get("QUICKPRINT_COLOR_RATE_CENTS")
    DOUBLE_SIDED_MULTIPLIER = os.environ.get("QUICKPRINT_DOUBLE_SIDED_MULTIPLIER")
    PLATFORM_FEE_CENTS = os.environ.get("QUICKPRINT_PLATFORM_FEE_CENTS")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SHOP_TIMEZONE = "UTC"
