"""Unique identifiers for callers minting primary-key values."""

from __future__ import annotations

import uuid


def generate_unique_id() -> str:
    return str(uuid.uuid4())


def unique_short_id() -> str:
    """First group of a fresh UUID (8 hex characters)."""
    return generate_unique_id().split("-", 1)[0]


def custom_uid(prefix: str) -> str:
    """``prefix`` followed by a short unique id, e.g. ``"user-1a2b3c4d"``."""
    return prefix + unique_short_id()
