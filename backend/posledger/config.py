# backend/posledger/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/posledger.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///posledger.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Seconds a SQLite writer waits on a locked database before OperationalError
    LEDGER_SQLITE_BUSY_TIMEOUT = float(os.environ.get("LEDGER_SQLITE_BUSY_TIMEOUT", "5"))

    # Bounded retry for lock contention and optimistic version conflicts
    LEDGER_RETRY_ATTEMPTS = int(os.environ.get("LEDGER_RETRY_ATTEMPTS", "3"))
    LEDGER_RETRY_BACKOFF_SECONDS = float(os.environ.get("LEDGER_RETRY_BACKOFF_SECONDS", "0.1"))

    # Products at or below this quantity are flagged in catalog listings
    LOW_STOCK_THRESHOLD = int(os.environ.get("LOW_STOCK_THRESHOLD", "10"))
