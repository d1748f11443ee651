"""
Tests for input validators.
"""

import pytest

from blogapi.exceptions import ValidationError
from blogapi.validators import (
    normalize_email,
    validate_categories,
    validate_comment,
    validate_frequency,
    validate_password,
    validate_report_reason,
    validate_slug,
    validate_username,
)


class TestValidateComment:
    """Tests for comment validation."""

    def test_trims(self):
        assert validate_comment("  hello  ") == "hello"

    def test_limit_counts_trimmed_text(self):
        assert len(validate_comment("  " + "a" * 600 + "  ")) == 600

    def test_link_check_is_case_sensitive(self):
        text = "HTTP status codes explained well"
        assert validate_comment(text) == text

    @pytest.mark.parametrize("text", [None, "", "   ", "a" * 601, "see http://x.example", "visit https-site"])
    def test_rejected(self, text):
        with pytest.raises(ValidationError):
            validate_comment(text)


class TestValidatePassword:

    def test_valid(self):
        assert validate_password("Aa1!aa") == "Aa1!aa"

    @pytest.mark.parametrize("password", [None, "Aa1!", "aa1!aaaa", "AA1!AAAA", "Aa!aaaaa", "Aa1aaaaa"])
    def test_rejected(self, password):
        with pytest.raises(ValidationError):
            validate_password(password)

    def test_byte_limit(self):
        assert validate_password("Aa1!" + "a" * 68) == "Aa1!" + "a" * 68
        with pytest.raises(ValidationError):
            validate_password("Aa1!" + "a" * 69)


class TestNormalizeEmail:

    def test_lowercases_and_trims(self):
        assert normalize_email("  Someone@Example.COM ") == "someone@example.com"

    @pytest.mark.parametrize("email", [None, "", "no-at-sign", "a@", "@example.com"])
    def test_rejected(self, email):
        with pytest.raises(ValidationError):
            normalize_email(email)


class TestMiscValidators:
    """Tests for slug, username, category, frequency and reason checks."""

    def test_slug(self):
        assert validate_slug("how-to-sleep-2") == "how-to-sleep-2"
        for bad in ("Upper", "double--dash", "-leading", "spa ce", ""):
            with pytest.raises(ValidationError):
                validate_slug(bad)

    def test_username(self):
        assert validate_username("  user_name-1 ") == "user_name-1"
        with pytest.raises(ValidationError):
            validate_username("abcd")

    def test_categories_deduplicated(self):
        assert validate_categories(["life", "beauty", "life"]) == ["life", "beauty"]
        with pytest.raises(ValidationError):
            validate_categories(["life", "astrology"])

    def test_frequency(self):
        assert validate_frequency("monthly") == "monthly"
        with pytest.raises(ValidationError):
            validate_frequency("hourly")

    def test_report_reason(self):
        assert validate_report_reason("false_information") == "false_information"
        with pytest.raises(ValidationError):
            validate_report_reason("boring")
