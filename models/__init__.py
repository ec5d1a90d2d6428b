"""Database initialization and model exports."""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine


db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Make SQLite honour ON DELETE CASCADE like the production database."""

    module = type(dbapi_connection).__module__
    if not module.startswith("sqlite3"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Import models to register them with SQLAlchemy metadata.
from .user import User  # noqa: E402,F401
from .tool import Tool, ToolImage  # noqa: E402,F401

__all__ = [
    "db",
    "User",
    "Tool",
    "ToolImage",
]
