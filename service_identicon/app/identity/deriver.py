"""
Salted identity derivation.
"""

import hashlib
import re

IDENTIFIER_LENGTH = 64
_IDENTIFIER_RE = re.compile(r"[0-9a-f]{64}")


def derive(name: str, salt: str) -> str:
    """Return the lowercase hex SHA-256 of ``name`` followed by ``salt``."""
    return hashlib.sha256(f"{name}{salt}".encode("utf-8")).hexdigest()


def is_identifier(value: str) -> bool:
    """Check whether a string has the shape of a derived identifier."""
    return bool(_IDENTIFIER_RE.fullmatch(value))


class IdentityDeriver:
    """Derives identifiers with a salt fixed at construction."""

    def __init__(self, salt: str):
        self._salt = salt

    def derive(self, name: str) -> str:
        return derive(name, self._salt)

    def __repr__(self) -> str:
        return "IdentityDeriver(salt=<redacted>)"
