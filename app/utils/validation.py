"""
Local input validation shared by registration and user management
"""

import re
from typing import Optional

from app.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def sanitize_email(email: Optional[str]) -> str:
    """Trim and lowercase; also the document key of a whitelist placeholder"""
    return (email or "").strip().lower()


def validate_email_format(email: str) -> None:
    if not EMAIL_PATTERN.match(email or ""):
        raise ValidationError("Mohon masukkan alamat email yang valid.")


def validate_new_password(password: str, confirm_password: str) -> None:
    """
    Check a password chosen by the user

    Raises:
        ValidationError: If it is too short or the confirmation differs
    """
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password minimal {MIN_PASSWORD_LENGTH} karakter.")
    if password != confirm_password:
        raise ValidationError("Konfirmasi password tidak cocok!")
