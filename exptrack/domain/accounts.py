"""Pure functions for account registration and profile edits.

This module contains the functional core for user accounts:
- No I/O operations (no network, no console, no files)
- No side effects
- Pure data transformations
- Easy to test
"""

from dataclasses import dataclass
from typing import Any

from exptrack.errors import ValidationError

MIN_PASSWORD_LENGTH = 6

# Profile fields a user may change, mapped to the backend's names.
# Email and password are not editable through the profile.
PROFILE_FIELDS: dict[str, str] = {
    "first_name": "firstName",
    "last_name": "lastName",
    "phone": "phone",
    "locale": "locale",
    "timezone": "timezone",
}


@dataclass(frozen=True)
class Registration:
    """Sign-up form for a new account."""

    email: str
    password: str
    username: str
    first_name: str
    last_name: str
    terms_accepted: bool = False
    privacy_policy_accepted: bool = False

    def to_json(self) -> dict[str, Any]:
        return {
            "email": self.email,
            "password": self.password,
            "username": self.username,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "termsAccepted": self.terms_accepted,
            "privacyPolicyAccepted": self.privacy_policy_accepted,
        }


def validate_registration(registration: Registration, confirm_password: str) -> list[str]:
    """Validate a sign-up form.

    Args:
        registration: Form values.
        confirm_password: Password as typed a second time.

    Returns:
        List of error messages. Empty if the form is valid.
    """
    errors = []

    if not registration.first_name.strip():
        errors.append("First name is required")
    if not registration.last_name.strip():
        errors.append("Last name is required")
    if not registration.username.strip():
        errors.append("Username is required")

    email = registration.email.strip()
    if not email:
        errors.append("Email is required")
    elif "@" not in email:
        errors.append(f"Invalid email address '{email}'")

    if registration.password != confirm_password:
        errors.append("Passwords do not match")
    if len(registration.password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if not registration.terms_accepted:
        errors.append("You must accept the terms of service")
    if not registration.privacy_policy_accepted:
        errors.append("You must accept the privacy policy")

    return errors


def build_registration(
    email: str,
    password: str,
    confirm_password: str,
    username: str,
    first_name: str,
    last_name: str,
    terms_accepted: bool = False,
    privacy_policy_accepted: bool = False,
) -> Registration:
    """Validate sign-up input and build the form from it.

    Raises:
        ValidationError: If any field is invalid.
    """
    registration = Registration(
        email=email.strip(),
        password=password,
        username=username.strip(),
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        terms_accepted=terms_accepted,
        privacy_policy_accepted=privacy_policy_accepted,
    )
    errors = validate_registration(registration, confirm_password)
    if errors:
        raise ValidationError(errors)
    return registration


def profile_changes(**values: str | None) -> dict[str, str]:
    """Build a profile update payload from the fields that were given.

    Raises:
        ValueError: If a field cannot be edited.
    """
    changes = {}
    for name, value in values.items():
        if name not in PROFILE_FIELDS:
            raise ValueError(f"Profile field '{name}' cannot be edited")
        if value is not None:
            changes[PROFILE_FIELDS[name]] = value.strip()
    return changes
