import html
import re
from typing import Optional


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def validate_text_input(value: Optional[str], max_length: int = 500) -> str:
    """
    Validate free-text user input (booking notes).

    The text is stored as submitted, apart from surrounding whitespace and
    control characters. Escaping belongs to whatever renders it, see
    ``sanitize_string``.

    Args:
        value: Input string to validate
        max_length: Maximum allowed length

    Returns:
        Cleaned string

    Raises:
        ValueError: If input is invalid
    """
    if not value:
        return ""

    value = str(value).strip()

    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    value = re.sub(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]", "", value)

    return value
