"""
Central configuration loader.
Reads from environment variables (via .env).
NEVER logs or prints the database passphrase.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv


# ---------------------------------------------------------------------------
# Load .env from the working directory upwards (if present)
# ---------------------------------------------------------------------------
load_dotenv(find_dotenv(usecwd=True))

DEFAULT_DB_PATH = Path("data") / "hlib.db"


def _get(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    val = os.getenv(key, default)
    if required and not val:
        raise EnvironmentError(f"Missing required environment variable: {key}")
    return val


# ---------------------------------------------------------------------------
# Database file
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class DatabaseFile:
    """Location of the database plus the optional encryption passphrase."""

    name: Path
    password: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", Path(self.name))

    def __repr__(self) -> str:
        masked = "***" if self.password else None
        return f"DatabaseFile(name={str(self.name)!r}, password={masked!r})"

    @property
    def encrypted(self) -> bool:
        return bool(self.password)


def get_db_path() -> Path:
    return Path(_get("HLIB_DB_PATH", default=str(DEFAULT_DB_PATH)))  # type: ignore[arg-type]


def get_database_file() -> DatabaseFile:
    return DatabaseFile(
        name=get_db_path(),
        password=_get("HLIB_DB_PASSPHRASE") or None,
    )
