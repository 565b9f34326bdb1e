"""Tests for exptrack.domain.accounts pure functions."""

import pytest

from exptrack.domain.accounts import Registration, build_registration, profile_changes, validate_registration
from exptrack.errors import ValidationError


def registration(**overrides: object) -> Registration:
    values: dict = {
        "email": "ana@example.com",
        "password": "secret1",
        "username": "ana",
        "first_name": "Ana",
        "last_name": "Lopez",
        "terms_accepted": True,
        "privacy_policy_accepted": True,
    }
    values.update(overrides)
    return Registration(**values)


class TestValidateRegistration:
    """Tests for validate_registration."""

    def test_valid(self) -> None:
        """Should return no errors for a complete form."""
        assert validate_registration(registration(), "secret1") == []

    def test_password_mismatch(self) -> None:
        """Should reject a confirmation that differs."""
        assert validate_registration(registration(), "secret2") == ["Passwords do not match"]

    def test_short_password(self) -> None:
        """Should require at least 6 characters."""
        errors = validate_registration(registration(password="abc"), "abc")

        assert errors == ["Password must be at least 6 characters long"]

    def test_terms_and_privacy_required(self) -> None:
        """Should require both agreements."""
        errors = validate_registration(
            registration(terms_accepted=False, privacy_policy_accepted=False), "secret1"
        )

        assert errors == ["You must accept the terms of service", "You must accept the privacy policy"]

    def test_invalid_email(self) -> None:
        """Should reject an address without @."""
        assert validate_registration(registration(email="ana"), "secret1") == ["Invalid email address 'ana'"]

    def test_required_names(self) -> None:
        """Should report every missing name field."""
        errors = validate_registration(registration(first_name="", last_name=" ", username=""), "secret1")

        assert errors == ["First name is required", "Last name is required", "Username is required"]


class TestBuildRegistration:
    """Tests for build_registration."""

    def test_strips_fields(self) -> None:
        """Should strip whitespace around names and email but not the password."""
        form = build_registration(
            " ana@example.com ", " secret1", " secret1", " ana ", " Ana ", " Lopez ", True, True
        )

        assert form == registration(password=" secret1")

    def test_raises_validation_error(self) -> None:
        """Should raise with every problem listed."""
        with pytest.raises(ValidationError) as exc_info:
            build_registration("ana@example.com", "abc", "abd", "ana", "Ana", "Lopez", True, True)

        assert exc_info.value.errors == [
            "Passwords do not match",
            "Password must be at least 6 characters long",
        ]

    def test_to_json(self) -> None:
        """Should use the backend's field names."""
        assert registration().to_json() == {
            "email": "ana@example.com",
            "password": "secret1",
            "username": "ana",
            "firstName": "Ana",
            "lastName": "Lopez",
            "termsAccepted": True,
            "privacyPolicyAccepted": True,
        }


class TestProfileChanges:
    """Tests for profile_changes."""

    def test_only_given_fields(self) -> None:
        """Should map names and leave out fields that were not given."""
        changes = profile_changes(first_name=" Ana ", last_name=None, timezone="Europe/Madrid")

        assert changes == {"firstName": "Ana", "timezone": "Europe/Madrid"}

    def test_nothing_given(self) -> None:
        """Should produce an empty payload."""
        assert profile_changes(first_name=None, phone=None) == {}

    def test_email_not_editable(self) -> None:
        """Should refuse fields outside the editable set."""
        with pytest.raises(ValueError, match="email"):
            profile_changes(email="new@example.com")
