# backend/sanctus/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite by default; production runs on PostgreSQL via DATABASE_URL
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///sanctus.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Shared pool with a small fixed bound (ignored by SQLite)
    DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "5"))

    # Session tokens. No default secret: create_app refuses to start without one.
    JWT_SECRET = os.environ.get("JWT_SECRET")
    JWT_ALGORITHM = "HS256"
    JWT_TTL_HOURS = 24

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "console")

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,tauri://localhost",
        ).split(",")
        if origin.strip()
    ]
