"""
Request validation – named rule-sets and the verdicts they produce.
"""

from typing import Any, Dict, List, Mapping

from medbook.config import APPOINTMENT_MODES, APPOINTMENT_STATUSES, APPOINTMENT_TYPES, PRIORITIES
from medbook.models import FieldError, FieldPath, ValidationRule, ValidationVerdict
from medbook import rules

MISSING = object()


RULE_SETS: Dict[str, List[ValidationRule]] = {
    "register": [
        rules.email_rule(),
        rules.password_rule(),
        rules.name_rule("firstName"),
        rules.name_rule("lastName"),
        rules.role_rule(),
        rules.phone_rule(),
        rules.required_text_rule("specialization", "Specialization is required for doctors",
                                 optional=True),
        rules.required_text_rule("licenseNumber", "License number is required for doctors",
                                 optional=True),
    ],
    "login": [
        rules.email_rule(),
        rules.password_present_rule(),
    ],
    "create-appointment": [
        rules.object_id_rule("doctor"),
        rules.appointment_date_rule(),
        rules.appointment_time_rule("start"),
        rules.appointment_time_rule("end"),
        rules.enum_rule("type", APPOINTMENT_TYPES, "Invalid appointment type"),
        rules.enum_rule("mode", APPOINTMENT_MODES, "Invalid appointment mode", optional=True),
        rules.enum_rule("priority", PRIORITIES, "Invalid priority level", optional=True),
        rules.required_text_rule("chiefComplaint", "Chief complaint is required"),
        ValidationRule(FieldPath("symptoms"), rules.is_text_list,
                       "Symptoms must be a list of text", optional=True),
        ValidationRule(FieldPath("additionalNotes"), rules.is_text,
                       "Additional notes must be text", optional=True, sanitizer=rules.trim),
    ],
    "update-profile": [
        rules.name_rule("firstName", optional=True),
        rules.name_rule("lastName", optional=True),
        rules.phone_rule(),
    ],
    "rate-appointment": [
        rules.rating_rule(),
        ValidationRule(FieldPath("feedback"), rules.is_text,
                       "Feedback must be text", optional=True, sanitizer=rules.trim),
    ],
    "pagination": [
        rules.int_range_rule("page", 1, None, "Page must be a positive integer"),
        rules.int_range_rule("limit", 1, 100, "Limit must be between 1 and 100"),
    ],
    "update-status": [
        rules.enum_rule("status", APPOINTMENT_STATUSES, "Invalid appointment status"),
    ],
}


def lookup(payload: Any, path: FieldPath) -> Any:
    """Return the value at *path*, or MISSING when it is absent or null."""
    if not isinstance(payload, Mapping):
        return MISSING
    value = payload.get(path.name, MISSING)
    if path.part is not None:
        if not isinstance(value, Mapping):
            return MISSING
        value = value.get(path.part, MISSING)
    return MISSING if value is None else value


def get_rule_set(name: str) -> List[ValidationRule]:
    """Return the named rule-set; unknown names are a programming error."""
    try:
        return RULE_SETS[name]
    except KeyError:
        raise KeyError(f"Unknown rule-set '{name}'") from None


def validate(rule_set: str, payload: Any) -> ValidationVerdict:
    """Run every rule of *rule_set* against *payload* and collect all failures."""
    errors = []
    for rule in get_rule_set(rule_set):
        value = lookup(payload, rule.path)
        if value is MISSING:
            if rule.optional:
                continue
            passed = False
        else:
            passed = rule.predicate(value)
        if not passed:
            errors.append(FieldError(field=str(rule.path), message=rule.message))
    return ValidationVerdict(ok=not errors, errors=errors)


def clean(rule_set: str, payload: Mapping) -> dict:
    """Return a copy of an accepted *payload* with each rule's sanitizer applied.

    Only top-level fields are rewritten; nested values are copied as-is.
    """
    cleaned = dict(payload)
    for rule in get_rule_set(rule_set):
        if rule.sanitizer is None or rule.path.part is not None:
            continue
        value = lookup(payload, rule.path)
        if value is not MISSING:
            cleaned[rule.path.name] = rule.sanitizer(value)
    return cleaned
