"""ID generators (CUID2) and identifier checks."""

import re

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def is_valid_identifier(value: str | None) -> bool:
    """True for ids safe to embed in object keys and cache keys."""
    return bool(value) and bool(_IDENTIFIER_RE.fullmatch(value))
