"""Input sanitization for free-text document fields (title, category, notes)."""

import nh3


def sanitize_text(value: str | None, max_length: int | None = None) -> str | None:
    """Strip all HTML with nh3 and trim whitespace.

    Returns None for None or for values that are empty after cleaning.
    """
    if value is None:
        return None
    cleaned = nh3.clean(value, tags=set(), attributes={}).strip()
    if max_length is not None:
        cleaned = cleaned[:max_length]
    return cleaned or None
