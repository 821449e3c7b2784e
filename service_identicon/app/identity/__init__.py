"""
Identity derivation for identicons.

Maps names to salted SHA-256 identifiers used both as cache keys and as
generation backend request parameters.
"""

from .deriver import IdentityDeriver, derive, is_identifier, IDENTIFIER_LENGTH

__all__ = ["IdentityDeriver", "derive", "is_identifier", "IDENTIFIER_LENGTH"]
