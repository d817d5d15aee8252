# backend/franchise_metrics/config.py
from __future__ import annotations
import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/franchise_metrics.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///franchise_metrics.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Metrics engine retries (per sub-query) and fan-out limits
    METRICS_RETRY_ATTEMPTS = int(os.environ.get("METRICS_RETRY_ATTEMPTS", "2"))
    METRICS_RETRY_BACKOFF = float(os.environ.get("METRICS_RETRY_BACKOFF", "0.05"))
    METRICS_MAX_WORKERS = int(os.environ.get("METRICS_MAX_WORKERS", "8"))
    METRICS_REQUEST_TIMEOUT = float(os.environ.get("METRICS_REQUEST_TIMEOUT", "10.0"))

    # Size of top/bottom performer lists
    METRICS_RANKING_SIZE = int(os.environ.get("METRICS_RANKING_SIZE", "3"))
    REPORT_RANKING_SIZE = int(os.environ.get("REPORT_RANKING_SIZE", "10"))
