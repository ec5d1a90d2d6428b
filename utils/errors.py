"""Application error types.

Each error maps onto the matching werkzeug HTTP exception so the JSON error
handlers registered by the application factory can render it directly.
"""

from __future__ import annotations

from werkzeug.exceptions import (
    BadRequest,
    Conflict,
    Forbidden,
    InternalServerError,
    NotFound,
    ServiceUnavailable,
    Unauthorized,
    UnprocessableEntity,
)


class ValidationError(BadRequest):
    """Malformed or missing request fields."""


class UnauthorizedError(Unauthorized):
    """No identity is attached where one is required."""

    description = "Authentication required."


class ForbiddenError(Forbidden):
    """The attached identity may not act on the target resource."""


class NotFoundError(NotFound):
    """A referenced user or tool does not exist."""


class ConflictError(Conflict):
    """A unique value (such as an email address) is already taken."""


class AssetGenerationError(UnprocessableEntity):
    """An image variant could not be decoded, encoded, or written."""


class StoreError(InternalServerError):
    """The relational store rejected or failed an operation."""

    description = "A database error occurred."


class FilesystemError(InternalServerError):
    """An original or derived asset could not be read, written, or removed."""


class MailDeliveryError(ServiceUnavailable):
    """The outgoing mail transport failed."""

    description = "Unable to send email at this time."
