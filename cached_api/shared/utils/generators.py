"""Identifier generators for ORM defaults."""

import secrets
import string

from cuid2 import cuid_wrapper

_next_cuid = cuid_wrapper()

_IDENTIFIER_ALPHABET = string.ascii_lowercase + string.digits


def generate_cuid() -> str:
    """New CUID2 primary key. Never contains the cache key separator."""
    return str(_next_cuid())


def generate_identifier(length: int = 12) -> str:
    """Short human-facing reference (e.g. ticket identifier), lowercase alphanumeric."""
    return "".join(secrets.choice(_IDENTIFIER_ALPHABET) for _ in range(length))
