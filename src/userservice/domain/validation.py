"""
Validation rules for user input.

Both checks are pure functions over strings. The ``is_valid_*`` variants
return a boolean; the others return the accepted value or raise the
matching domain exception.
"""

import re

from .exceptions import InvalidEmailError, InvalidNameError

MAX_EMAIL_LENGTH = 254
MAX_NAME_LENGTH = 255

_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


def is_valid_email(email: str) -> bool:
    """
    Check an email address against the accepted grammar.

    Rules:
    - at most 254 characters
    - exactly one ``@`` with non-empty local and domain parts
    - domain ends in an alphabetic label of two or more letters
    - no consecutive dots anywhere
    - neither part starts or ends with a dot
    """
    if len(email) > MAX_EMAIL_LENGTH:
        return False

    # fullmatch: ``$`` would accept a trailing newline
    if not _EMAIL_PATTERN.fullmatch(email):
        return False

    parts = email.split("@")
    if len(parts) != 2:
        return False
    local, domain = parts

    if ".." in email:
        return False

    if local.startswith(".") or local.endswith("."):
        return False

    if domain.startswith(".") or domain.endswith("."):
        return False

    return True


def validate_email(email: str) -> str:
    """
    Validate an email address.

    Args:
        email: Address to validate

    Returns:
        The address, unchanged

    Raises:
        InvalidEmailError: If the address violates any rule
    """
    if not is_valid_email(email):
        raise InvalidEmailError()
    return email


def normalize_name(name: str) -> str:
    """
    Trim and validate a display name.

    Args:
        name: Raw name as supplied by the caller

    Returns:
        The trimmed name

    Raises:
        InvalidNameError: If the trimmed name is empty or longer than 255 characters
    """
    trimmed = name.strip()
    if not trimmed:
        raise InvalidNameError()
    if len(trimmed) > MAX_NAME_LENGTH:
        raise InvalidNameError(f"name cannot exceed {MAX_NAME_LENGTH} characters")
    return trimmed


def is_valid_name(name: str) -> bool:
    """Check whether a name would be accepted after trimming."""
    try:
        normalize_name(name)
    except InvalidNameError:
        return False
    return True
