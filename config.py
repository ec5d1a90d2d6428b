"""Application configuration module."""

import os
from datetime import timedelta
from pathlib import Path


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "y"}


class Config:
    """Base configuration for the Flask application."""

    # Core
    ENVIRONMENT = os.getenv("APP_ENV", "development")
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///app.db")
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Assets: originals live under ASSET_ROOT/UPLOAD_FOLDER, variants beside them
    ASSET_ROOT = os.getenv("ASSET_ROOT", str(Path(__file__).resolve().parent / "public"))
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024  # 20 MiB
    MAX_TOOL_IMAGES = int(os.getenv("MAX_TOOL_IMAGES", "5"))
    ALLOWED_IMAGE_TYPES = os.getenv("ALLOWED_IMAGE_TYPES", "jpg,jpeg,png,webp,gif")
    ALLOWED_MANUAL_TYPES = os.getenv("ALLOWED_MANUAL_TYPES", "pdf,txt,doc,docx")

    # Session cookie (flask-jwt-extended)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_TOKEN_LOCATION = ["cookies", "headers"]
    JWT_ACCESS_COOKIE_NAME = "token"
    JWT_COOKIE_SECURE = ENVIRONMENT == "production"
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_CSRF_PROTECT = _env_flag("JWT_COOKIE_CSRF_PROTECT")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    SESSION_REMEMBER_EXPIRES = timedelta(days=7)

    # Mail
    MAIL_HOST = os.getenv("EMAIL_HOST", "localhost")
    MAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
    MAIL_USERNAME = os.getenv("EMAIL_USER")
    MAIL_PASSWORD = os.getenv("EMAIL_PASS")
    MAIL_USE_TLS = _env_flag("EMAIL_USE_TLS", "true")
    MAIL_SENDER = os.getenv("EMAIL_FROM", "no-reply@toolshare.local")
    MAIL_SUPPRESS_SEND = _env_flag("MAIL_SUPPRESS_SEND")
    SERVER_HOST = os.getenv("SERVER_HOST", "localhost:5000")

    # CORS
    _raw_origins = os.getenv("ORIGINS", "*")
    if _raw_origins.strip() == "*":
        CORS_ORIGINS = "*"
    else:
        CORS_ORIGINS = [o.strip() for o in _raw_origins.split(",") if o.strip()]
