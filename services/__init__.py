"""Application services."""

from .mailer import Mailer
from .tools import ToolService

__all__ = ["Mailer", "ToolService"]
