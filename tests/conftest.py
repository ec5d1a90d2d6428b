"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import re
import sys
from io import BytesIO
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient
from flask_jwt_extended import create_access_token
from PIL import Image

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402
from services.tools import ToolService  # noqa: E402
from storage.assets import AssetCache  # noqa: E402
from storage.local_storage import LocalStorage  # noqa: E402

TOKEN_PATTERN = re.compile(r"token=([0-9a-f]{64})")


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    JWT_COOKIE_SECURE = False
    JWT_COOKIE_CSRF_PROTECT = False
    MAIL_SUPPRESS_SEND = True
    SERVER_HOST = "testserver"
    LOG_LEVEL = "DEBUG"


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    asset_root = tmp_path / "public"

    class TestConfig(_BaseTestConfig):
        ASSET_ROOT = str(asset_root)

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def storage(app: Flask) -> LocalStorage:
    return LocalStorage(app.config["ASSET_ROOT"])


@pytest.fixture()
def service(app: Flask, storage: LocalStorage) -> ToolService:
    """A ToolService bound to the app's session; runs inside an app context."""

    with app.app_context():
        yield ToolService(db.session, storage, AssetCache(storage))


def image_bytes(size: tuple[int, int] = (640, 480), fmt: str = "JPEG", color: str = "orange") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def create_user(email: str, password: str = "Password123", *, verified: bool = True) -> User:
    """Persist a user; must be called inside an app context."""

    user = User(email=email)
    user.set_password(password)
    if verified:
        user.mark_verified()
    else:
        user.issue_verification_token()
    db.session.add(user)
    db.session.commit()
    return user


def auth_headers(app: Flask, user_id: int) -> dict[str, str]:
    with app.app_context():
        token = create_access_token(identity=str(user_id))
    return {"Authorization": f"Bearer {token}"}


def verification_token_from(message) -> str:
    html = message.get_body(preferencelist=("html",)).get_content()
    match = TOKEN_PATTERN.search(html)
    assert match, html
    return match.group(1)
