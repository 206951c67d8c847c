"""Input validation rules.

The ``is_valid_*`` predicates are pure. The ``validate_*`` functions check a
whole form, collect every violated rule, and raise a single
``ValidationFailed`` listing them all.
"""

import re
from typing import Any

from storerate.core.exceptions import ValidationFailed
from storerate.models.rating import MAX_RATING, MIN_RATING
from storerate.models.user import UserRole

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
UPPERCASE_RE = re.compile(r"[A-Z]")
SPECIAL_CHAR_RE = re.compile(r"""[!@#$%^&*()_+\-=\[\]{};':"\\|,.<>/?]""")

NAME_MIN_LENGTH = 20
NAME_MAX_LENGTH = 60
ADDRESS_MAX_LENGTH = 400
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 16

NAME_RULE = f"must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
PASSWORD_RULE = (
    f"must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters with at least "
    "one uppercase letter and one special character"
)
ADDRESS_RULE = f"Address must not exceed {ADDRESS_MAX_LENGTH} characters"
EMAIL_RULE = "Please provide a valid email address"
RATING_RULE = f"Rating must be between {MIN_RATING} and {MAX_RATING}"
ROLE_RULE = "Invalid role specified"
STORE_ID_REQUIRED = "Store ID is required"


# === Predicates ===


def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and EMAIL_RE.match(email) is not None


def is_valid_password(password: Any) -> bool:
    if not isinstance(password, str):
        return False
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        return False
    return bool(UPPERCASE_RE.search(password)) and bool(SPECIAL_CHAR_RE.search(password))


def is_valid_name(name: Any) -> bool:
    if not isinstance(name, str):
        return False
    return NAME_MIN_LENGTH <= len(name.strip()) <= NAME_MAX_LENGTH


def is_valid_address(address: Any) -> bool:
    if not isinstance(address, str):
        return False
    return len(address.strip()) <= ADDRESS_MAX_LENGTH


def is_valid_rating(rating: Any) -> bool:
    """Whole numbers 1-5, given as an int or a numeric string."""
    if isinstance(rating, bool):
        return False
    if isinstance(rating, str):
        try:
            rating = int(rating.strip())
        except ValueError:
            return False
    if not isinstance(rating, int):
        return False
    return MIN_RATING <= rating <= MAX_RATING


def is_valid_role(role: Any) -> bool:
    return role in {r.value for r in UserRole}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# === Field checks shared by the form validators ===


def _check_name(errors: list[str], name: Any, label: str = "Name") -> None:
    if _is_blank(name):
        errors.append(f"{label} is required")
    elif not is_valid_name(name):
        errors.append(f"{label} {NAME_RULE}")


def _check_email(errors: list[str], email: Any, label: str = "Email") -> None:
    if _is_blank(email):
        errors.append(f"{label} is required")
    elif not is_valid_email(email):
        errors.append(EMAIL_RULE)


def _check_password(errors: list[str], password: Any, label: str = "Password") -> None:
    if _is_blank(password):
        errors.append(f"{label} is required")
    elif not is_valid_password(password):
        errors.append(f"{label} {PASSWORD_RULE}")


def _check_address(errors: list[str], address: Any, label: str = "Address") -> None:
    if _is_blank(address):
        errors.append(f"{label} is required")
    elif not is_valid_address(address):
        errors.append(ADDRESS_RULE)


def _raise_if_any(errors: list[str]) -> None:
    if errors:
        raise ValidationFailed(errors)


# === Form validators ===


def validate_registration(name: Any, email: Any, password: Any, address: Any) -> None:
    errors: list[str] = []
    _check_name(errors, name)
    _check_email(errors, email)
    _check_password(errors, password)
    _check_address(errors, address)
    _raise_if_any(errors)


def validate_user_creation(
    name: Any, email: Any, password: Any, address: Any, role: Any = None
) -> None:
    errors: list[str] = []
    _check_name(errors, name)
    _check_email(errors, email)
    _check_password(errors, password)
    _check_address(errors, address)
    if role is not None and not is_valid_role(role):
        errors.append(ROLE_RULE)
    _raise_if_any(errors)


def validate_login(email: Any, password: Any) -> None:
    errors: list[str] = []
    _check_email(errors, email)
    if _is_blank(password):
        errors.append("Password is required")
    _raise_if_any(errors)


def validate_password_update(current_password: Any, new_password: Any) -> None:
    errors: list[str] = []
    if _is_blank(current_password):
        errors.append("Current password is required")
    _check_password(errors, new_password, label="New password")
    _raise_if_any(errors)


def validate_profile_update(name: Any, address: Any) -> None:
    errors: list[str] = []
    _check_name(errors, name)
    _check_address(errors, address)
    _raise_if_any(errors)


def validate_store(
    name: Any,
    email: Any,
    address: Any,
    owner_id: Any = None,
    password: Any = None,
    *,
    require_owner: bool = True,
) -> None:
    """Validate a store form. Updates pass ``require_owner=False``."""
    errors: list[str] = []
    _check_name(errors, name, label="Store name")
    _check_email(errors, email, label="Store email")
    _check_address(errors, address, label="Store address")
    if require_owner and _is_blank(owner_id):
        errors.append("Store owner is required")
    if not _is_blank(password) and not is_valid_password(password):
        errors.append(f"Owner password {PASSWORD_RULE}")
    _raise_if_any(errors)


def validate_rating(rating: Any, store_id: Any = None, *, require_store: bool = True) -> None:
    errors: list[str] = []
    if require_store and _is_blank(store_id):
        errors.append(STORE_ID_REQUIRED)
    if _is_blank(rating):
        errors.append("Rating is required")
    elif not is_valid_rating(rating):
        errors.append(RATING_RULE)
    _raise_if_any(errors)
