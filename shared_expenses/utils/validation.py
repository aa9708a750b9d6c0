import re

from ..errors import ValidationError

_NAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z .'\-]{1,62}[a-zA-Z]$")
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


# PUBLIC_INTERFACE
def validate_name(name: str) -> str:
    """Return the trimmed name, or raise ValidationError.

    Names are 3-64 characters, start and end with a letter and contain only
    letters, spaces, periods, apostrophes and hyphens.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("name is empty")
    if not _NAME_RE.match(name):
        raise ValidationError(
            "invalid name: must be 3-64 characters, start and end with a letter, "
            "and contain only letters, spaces, periods, apostrophes, and hyphens"
        )
    return name


# PUBLIC_INTERFACE
def normalize_email(email: str) -> str:
    """Return the trimmed, lower-cased email, or raise ValidationError."""
    email = (email or "").strip().lower()
    if not email:
        raise ValidationError("email is empty")
    if not _EMAIL_RE.match(email):
        raise ValidationError("invalid email format")
    return email
