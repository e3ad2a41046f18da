# backend/liquor_pos/config.py
from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/liquor_pos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///liquor_pos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Items with quantity strictly below this are reported as low stock
    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))
    CUSTOMER_SEARCH_LIMIT = int(os.environ.get("CUSTOMER_SEARCH_LIMIT", "10"))

    # Re-credit stock already taken by a checkout whose inventory step failed.
    # Off: the cancelled transaction keeps the earlier decrements applied.
    CHECKOUT_RESTOCK_ON_FAILURE = _env_bool("CHECKOUT_RESTOCK_ON_FAILURE", False)

    SESSION_ABSOLUTE_TIMEOUT_HOURS = int(os.environ.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", "24"))
    SESSION_IDLE_TIMEOUT_HOURS = int(os.environ.get("SESSION_IDLE_TIMEOUT_HOURS", "2"))

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Age-restricted sales at the register
    MINIMUM_PURCHASE_AGE = int(os.environ.get("MINIMUM_PURCHASE_AGE", "21"))


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "DEBUG"
    CHECKOUT_RESTOCK_ON_FAILURE = False
    # Fast hashes for fixtures
    BCRYPT_ROUNDS = 4
