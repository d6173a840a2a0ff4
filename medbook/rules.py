"""
Rule catalog – single-field predicates and the rules built from them.

Every predicate is total: malformed input (wrong type, None, garbage text)
returns False instead of raising.
"""

import re
from datetime import date, datetime
from typing import Any, Collection, Optional

from email_validator import EmailNotValidError, validate_email

from medbook.config import ROLES
from medbook.models import FieldPath, ValidationRule

PHONE_RE = re.compile(r"^\+?[\d\s\-\(\)]+$")
OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")
CLOCK_TIME_RE = re.compile(r"^(0?[1-9]|1[0-2]):[0-5][0-9] (AM|PM)$")
# wider values are rejected rather than handed to int()
INT_RE = re.compile(r"^[+-]?\d{1,18}$")

MIN_PASSWORD_LENGTH = 6


# ── Coercion helpers ─────────────────────────────────────────────────

def to_int(value: Any) -> Optional[int]:
    """Return *value* as an int if it is an integer or integer-looking text."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    return None


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse an ISO-8601 date or date-time string into a calendar date."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def normalize_email(value: str) -> str:
    return value.strip().lower()


def trim(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


# ── Predicates ───────────────────────────────────────────────────────

def is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_password(value: Any) -> bool:
    return isinstance(value, str) and len(value) >= MIN_PASSWORD_LENGTH


def is_present(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 0


def is_non_blank(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) >= 1


def is_phone(value: Any) -> bool:
    return isinstance(value, str) and PHONE_RE.fullmatch(value) is not None


def is_object_id(value: Any) -> bool:
    return isinstance(value, str) and OBJECT_ID_RE.fullmatch(value) is not None


def is_iso_date(value: Any) -> bool:
    return parse_iso_date(value) is not None


def is_clock_time(value: Any) -> bool:
    return isinstance(value, str) and CLOCK_TIME_RE.fullmatch(value) is not None


def is_text(value: Any) -> bool:
    return isinstance(value, str)


def is_text_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def one_of(allowed: Collection[str]):
    allowed = frozenset(allowed)

    def predicate(value: Any) -> bool:
        return isinstance(value, str) and value in allowed

    return predicate


def int_between(minimum: Optional[int] = None, maximum: Optional[int] = None):
    def predicate(value: Any) -> bool:
        number = to_int(value)
        if number is None:
            return False
        if minimum is not None and number < minimum:
            return False
        if maximum is not None and number > maximum:
            return False
        return True

    return predicate


# ── Rules ────────────────────────────────────────────────────────────

def email_rule() -> ValidationRule:
    return ValidationRule(FieldPath("email"), is_email,
                          "Please provide a valid email", sanitizer=normalize_email)


def password_rule() -> ValidationRule:
    return ValidationRule(FieldPath("password"), is_password,
                          f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def password_present_rule() -> ValidationRule:
    return ValidationRule(FieldPath("password"), is_present, "Password is required")


def name_rule(field: str, optional: bool = False) -> ValidationRule:
    return ValidationRule(FieldPath(field), is_non_blank, f"{field} is required",
                          optional=optional, sanitizer=trim)


def phone_rule() -> ValidationRule:
    return ValidationRule(FieldPath("phone"), is_phone,
                          "Please provide a valid phone number", optional=True)


def object_id_rule(field: str) -> ValidationRule:
    return ValidationRule(FieldPath(field), is_object_id, f"Invalid {field}")


def appointment_date_rule() -> ValidationRule:
    return ValidationRule(FieldPath("appointmentDate"), is_iso_date,
                          "Please provide a valid date")


def appointment_time_rule(part: str) -> ValidationRule:
    return ValidationRule(FieldPath("appointmentTime", part), is_clock_time,
                          f"Please provide a valid {part} time")


def enum_rule(field: str, allowed: Collection[str], message: str,
              optional: bool = False) -> ValidationRule:
    return ValidationRule(FieldPath(field), one_of(allowed), message, optional=optional)


def int_range_rule(field: str, minimum: Optional[int], maximum: Optional[int],
                   message: str, optional: bool = True) -> ValidationRule:
    return ValidationRule(FieldPath(field), int_between(minimum, maximum), message,
                          optional=optional, sanitizer=to_int)


def role_rule() -> ValidationRule:
    return enum_rule("role", ROLES, "Invalid role")


def rating_rule() -> ValidationRule:
    return int_range_rule("rating", 1, 5, "Rating must be between 1 and 5", optional=False)


def required_text_rule(field: str, message: str, optional: bool = False) -> ValidationRule:
    return ValidationRule(FieldPath(field), is_non_blank, message,
                          optional=optional, sanitizer=trim)
