"""Reusable validation helpers."""

from __future__ import annotations


class BlankFieldError(ValueError):
    """Raised when a required text field is empty or whitespace."""


def ensure_not_blank(value: str, *, field_name: str) -> str:
    """Strip ``value`` and reject it when nothing is left.

    Args:
        value: Input text to evaluate.
        field_name: Name used in the raised error message.

    Returns:
        The stripped string when validation succeeds.

    Raises:
        BlankFieldError: If the value is empty after stripping.
    """

    stripped = (value or "").strip()
    if not stripped:
        raise BlankFieldError(f"{field_name} must not be blank")
    return stripped
