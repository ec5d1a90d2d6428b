"""Per-request session identity.

Every request passes through ``attach_identity``: a valid session token puts
the user id on ``g.identity``, anything else leaves it ``None``. Handlers that
need a signed-in user call ``require_identity``.
"""

from __future__ import annotations

from flask import current_app, g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from .errors import UnauthorizedError


def attach_identity() -> None:
    g.identity = None
    try:
        verify_jwt_in_request(optional=True)
        identity = get_jwt_identity()
    except (JWTExtendedException, PyJWTError, RuntimeError) as exc:
        current_app.logger.debug("Ignoring invalid session token: %s", exc)
        return

    if identity is None:
        return
    try:
        g.identity = int(identity)
    except (TypeError, ValueError):
        current_app.logger.debug("Ignoring session token with non-numeric identity")


def current_identity() -> int | None:
    return g.get("identity")


def require_identity() -> int:
    identity = current_identity()
    if identity is None:
        raise UnauthorizedError()
    return identity
