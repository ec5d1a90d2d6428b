"""Authentication blueprint: registration, email verification, and cookie login."""

from __future__ import annotations
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User
from utils.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from utils.request_validation import parse_bool, parse_json_request
from utils.session import require_identity

MIN_PASSWORD_LENGTH = 8
auth_bp = Blueprint("auth", __name__)


def _normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def _read_credentials() -> tuple[str, str]:
    payload = parse_json_request(request)
    email = _normalize_email(payload.get("email"))
    password = payload.get("password") or ""
    if not email or not password:
        raise ValidationError("Email and password are required.")
    return email, password


def _verification_link(token: str) -> str:
    host = current_app.config.get("SERVER_HOST", "localhost")
    return f"http://{host}/auth/verify?token={token}"


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple:
    """Create an unverified account and email it a verification link."""
    email, password = _read_credentials()

    if "@" not in email:
        raise ValidationError("A valid email address is required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )

    # Case-insensitive unique check
    existing = User.query.filter(func.lower(User.email) == email).first()
    if existing is not None:
        raise ConflictError("A user with that email already exists.")

    user = User(email=email)
    user.set_password(password)
    token = user.issue_verification_token()

    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ConflictError("A user with that email already exists.") from exc

    mailer = current_app.extensions["mailer"]
    mailer.send(
        to=email,
        subject="Verify Your Email",
        html=f'<a href="{_verification_link(token)}">Verify Email</a>',
    )
    current_app.logger.info("Registered user %s; verification email sent", user.id)

    return (
        jsonify(
            {
                "message": "Verification email sent.",
                "user": {"id": user.id, "email": user.email},
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.route("/verify", methods=["GET"])
def verify_email() -> tuple:
    """Consume a verification token. A token works exactly once."""
    token = (request.args.get("token") or "").strip()
    if not token:
        raise ValidationError("Invalid or expired token.")

    user = User.query.filter_by(verification_token=token).first()
    if user is None:
        raise ValidationError("Invalid or expired token.")

    user.mark_verified()
    db.session.commit()

    return jsonify({"message": "Email verified.", "user": user.to_dict()}), HTTPStatus.OK


@auth_bp.route("/login", methods=["POST"])
def login():
    """Authenticate a verified user and set the session cookie."""
    email, password = _read_credentials()
    payload = request.get_json(silent=True) or {}
    remember = parse_bool(payload.get("remember"))

    # Case-insensitive lookup
    user = User.query.filter(func.lower(User.email) == email).first()
    if user is None or not user.check_password(password):
        raise UnauthorizedError("Invalid email or password.")
    if not user.is_verified:
        raise ForbiddenError("Email address has not been verified.")

    if remember is False:
        expires = current_app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    else:
        expires = current_app.config["SESSION_REMEMBER_EXPIRES"]

    token = create_access_token(identity=str(user.id), expires_delta=expires)
    response = jsonify({"ok": True, "user": {"id": user.id, "email": user.email}})
    set_access_cookies(response, token, max_age=int(expires.total_seconds()))
    return response, HTTPStatus.OK


@auth_bp.route("/logout", methods=["POST"])
def logout():
    response = jsonify({"ok": True})
    unset_jwt_cookies(response)
    return response, HTTPStatus.OK


@auth_bp.route("/me", methods=["GET"])
def me():
    user = db.session.get(User, require_identity())
    if user is None:
        raise NotFoundError("User not found.")
    return jsonify({"user": user.to_dict()}), HTTPStatus.OK
