"""Input checks shared by the admin services."""

from __future__ import annotations

from pydantic import EmailStr, TypeAdapter, ValidationError

_email_adapter: TypeAdapter[str] | None = None


def is_valid_email(value: str) -> bool:
    """Syntax-only email check (no DNS/deliverability lookup)."""
    global _email_adapter
    if _email_adapter is None:
        _email_adapter = TypeAdapter(EmailStr)
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True
