"""
Appointment constraints – cross-field checks layered on top of the
create-appointment rule-set, plus slot-overlap detection.
"""

from typing import Iterable, List, Optional, Tuple

from medbook.config import ACTIVE_STATUSES, APPOINTMENT_MODES, APPOINTMENT_TYPES, PRIORITIES
from medbook.models import AppointmentDraft, FieldError, TimeRange, ValidationVerdict
from medbook.rules import CLOCK_TIME_RE, parse_iso_date
from medbook.validator import clean, validate


# ── Clock helpers ────────────────────────────────────────────────────

def parse_clock(value: str) -> Optional[int]:
    """Convert a 12-hour clock string ("9:05 PM") to minutes after midnight."""
    if not isinstance(value, str):
        return None
    m = CLOCK_TIME_RE.fullmatch(value)
    if not m:
        return None
    hour = int(m.group(1)) % 12
    minute = int(value.split(":")[1][:2])
    if m.group(2) == "PM":
        hour += 12
    return hour * 60 + minute


def time_bounds(time: TimeRange) -> Optional[Tuple[int, int]]:
    start, end = parse_clock(time.start), parse_clock(time.end)
    if start is None or end is None:
        return None
    return start, end


def overlaps(a: TimeRange, b: TimeRange) -> bool:
    """True if the two ranges share any minute (half-open intervals)."""
    first, second = time_bounds(a), time_bounds(b)
    if first is None or second is None:
        return False
    return first[0] < second[1] and second[0] < first[1]


# ── Draft building ───────────────────────────────────────────────────

def build_draft(payload: dict) -> AppointmentDraft:
    """Turn an accepted create-appointment payload into a draft.

    Callers must only pass payloads that already passed field validation.
    """
    data = clean("create-appointment", payload)
    time = data["appointmentTime"]
    return AppointmentDraft(
        doctor_id=data["doctor"],
        date=parse_iso_date(data["appointmentDate"]),
        time=TimeRange(start=time["start"], end=time["end"]),
        type=data["type"],
        chief_complaint=data["chiefComplaint"],
        mode=data.get("mode"),
        priority=data.get("priority"),
        symptoms=tuple(data.get("symptoms") or ()),
        additional_notes=data.get("additionalNotes"),
    )


# ── Invariants ───────────────────────────────────────────────────────

def check_invariants(draft: AppointmentDraft) -> ValidationVerdict:
    """Cross-field checks on a draft that passed the create-appointment rule-set."""
    errors: List[FieldError] = []

    bounds = time_bounds(draft.time)
    if bounds is not None and bounds[1] <= bounds[0]:
        errors.append(FieldError("appointmentTime.end", "End time must be after start time"))

    if draft.type not in APPOINTMENT_TYPES:
        errors.append(FieldError("type", "Invalid appointment type"))
    if draft.mode is not None and draft.mode not in APPOINTMENT_MODES:
        errors.append(FieldError("mode", "Invalid appointment mode"))
    if draft.priority is not None and draft.priority not in PRIORITIES:
        errors.append(FieldError("priority", "Invalid priority level"))
    if not draft.chief_complaint or not draft.chief_complaint.strip():
        errors.append(FieldError("chiefComplaint", "Chief complaint is required"))

    return ValidationVerdict(ok=not errors, errors=errors)


def validate_appointment(payload: dict) -> Tuple[ValidationVerdict, Optional[AppointmentDraft]]:
    """Field validation followed by the invariant check.

    Returns the combined verdict and, when it is ok, the accepted draft.
    """
    verdict = validate("create-appointment", payload)
    if not verdict.ok:
        return verdict, None
    draft = build_draft(payload)
    verdict = verdict.merge(check_invariants(draft))
    return verdict, draft if verdict.ok else None


def find_conflict(draft: AppointmentDraft, existing: Iterable[dict]) -> Optional[dict]:
    """Return the first active appointment for the same doctor and date that overlaps."""
    for appt in existing:
        if appt.get("doctor") != draft.doctor_id:
            continue
        if appt.get("status") not in ACTIVE_STATUSES:
            continue
        if parse_iso_date(appt.get("appointmentDate")) != draft.date:
            continue
        time = appt.get("appointmentTime") or {}
        other = TimeRange(start=time.get("start"), end=time.get("end"))
        if overlaps(draft.time, other):
            return appt
    return None
