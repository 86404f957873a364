"""
Identifiers - Opaque tokens for photos and generated thumbnail files.
"""

import re
import secrets

ID_LENGTH = 40
ID_PATTERN = re.compile(r"[0-9a-f]{40}")


def new_id() -> str:
    """Return a fresh 40-character lowercase hex token."""
    return secrets.token_hex(ID_LENGTH // 2)


def is_valid_id(value) -> bool:
    """True if value is a well-formed photo identifier."""
    return isinstance(value, str) and ID_PATTERN.fullmatch(value) is not None
