"""
Tests for the email and name validation rules.
"""

import pytest

from userservice.domain.exceptions import InvalidEmailError, InvalidNameError
from userservice.domain.validation import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    is_valid_email,
    is_valid_name,
    normalize_name,
    validate_email,
)


class TestEmailValidation:
    """Test suite for email validation."""

    @pytest.mark.parametrize("email", [
        "test@example.com",
        "jane.doe@example.co.uk",
        "first_last+tag@sub.domain.org",
        "a%b-c@x-y.io",
        "UPPER@EXAMPLE.COM",
    ])
    def test_accepts_valid_addresses(self, email):
        """Test that well-formed addresses are accepted."""
        assert is_valid_email(email)
        assert validate_email(email) == email

    @pytest.mark.parametrize("email", [
        "",
        "plainaddress",
        "@example.com",
        "user@",
        "user@example",
        "user@example.c",
        "user@@example.com",
        "user@exa@mple.com",
        "test..user@example.com",
        "user@example..com",
        ".user@example.com",
        "user.@example.com",
        "user@.example.com",
        "user name@example.com",
        "user@example.com\n",
        "user@example.123",
    ])
    def test_rejects_invalid_addresses(self, email):
        """Test that malformed addresses are rejected."""
        assert not is_valid_email(email)
        with pytest.raises(InvalidEmailError):
            validate_email(email)

    def test_length_boundary(self):
        """Test that 254 characters pass and 255 fail."""
        domain = "@example.com"
        at_limit = "a" * (MAX_EMAIL_LENGTH - len(domain)) + domain
        over_limit = "a" + at_limit

        assert len(at_limit) == 254
        assert is_valid_email(at_limit)
        assert not is_valid_email(over_limit)

    def test_error_message(self):
        """Test the error message for a malformed address."""
        with pytest.raises(InvalidEmailError, match="invalid email format"):
            validate_email("nope")


class TestNameValidation:
    """Test suite for name normalization."""

    def test_trims_surrounding_whitespace(self):
        """Test that surrounding whitespace is removed."""
        assert normalize_name("  Jane Doe  ") == "Jane Doe"

    def test_keeps_inner_whitespace(self):
        """Test that whitespace inside the name is preserved."""
        assert normalize_name("Jane   Doe") == "Jane   Doe"

    @pytest.mark.parametrize("name", ["", "   ", "\t\n"])
    def test_rejects_empty_names(self, name):
        """Test that empty and whitespace-only names are rejected."""
        with pytest.raises(InvalidNameError, match="name cannot be empty"):
            normalize_name(name)
        assert not is_valid_name(name)

    @pytest.mark.parametrize("name", [
        "Jane",
        "  Jane Doe  ",
        "\tJane\n",
        "\u3000Jane\u00a0",
        "",
        "   ",
        "\t\n ",
        " " + "x" * MAX_NAME_LENGTH + " ",
        "x" * (MAX_NAME_LENGTH + 1),
    ])
    def test_trimming_is_idempotent(self, name):
        """Test that validating a trimmed name gives the same outcome as trimming twice."""
        once = name.strip()
        twice = once.strip()

        assert is_valid_name(once) == is_valid_name(twice)
        if is_valid_name(once):
            assert normalize_name(once) == normalize_name(twice) == normalize_name(name)

    def test_length_is_checked_after_trimming(self):
        """Test that the 255 character limit applies to the trimmed name."""
        at_limit = "x" * MAX_NAME_LENGTH

        assert normalize_name(f"  {at_limit}  ") == at_limit
        with pytest.raises(InvalidNameError):
            normalize_name(at_limit + "x")
