"""Error taxonomy for the data-access layer."""

from __future__ import annotations

from typing import Optional

EMPTY_RESULT_MESSAGE = "The table is empty!"
NOT_CONNECTED_MESSAGE = "Not connected to database"


class HlibError(Exception):
    """Base class for every error raised by hlib."""


class DatabaseConnectionError(HlibError):
    """The database is not open, or could not be opened / unlocked."""


class SchemaError(HlibError):
    """Malformed table schema, or DDL that failed for a reason other than
    the table already existing."""


class BuilderError(HlibError):
    """Invalid arguments handed to the statement builder."""


class EngineError(HlibError):
    """A statement failed inside the storage engine."""


class EmptyResultError(HlibError):
    """A query succeeded but returned no rows."""

    def __init__(self, message: str = EMPTY_RESULT_MESSAGE):
        super().__init__(message)


def normalize_engine_error(message: Optional[str]) -> str:
    """Engine messages are reported with a capitalized first letter;
    ``"not an error"`` collapses to the empty string."""
    text = (message or "").strip()
    if text == "not an error":
        return ""
    return text[:1].upper() + text[1:]
