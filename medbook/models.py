"""
Domain dataclasses used across the application.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple


@dataclass(frozen=True)
class Session:
    """What the session reader knows about the caller."""
    token: Optional[str] = None
    role: Optional[str] = None    # "patient", "doctor", or "admin"

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and bool(self.role)


@dataclass(frozen=True)
class FieldPath:
    """A field in a request body, at most two levels deep."""
    name: str
    part: Optional[str] = None    # e.g. "start" for appointmentTime.start

    def __str__(self) -> str:
        return f"{self.name}.{self.part}" if self.part else self.name


@dataclass(frozen=True)
class ValidationRule:
    """A single-field predicate paired with its failure message."""
    path: FieldPath
    predicate: Callable[[Any], bool]
    message: str
    optional: bool = False    # absent values pass without running the predicate
    sanitizer: Optional[Callable[[Any], Any]] = None


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class ValidationVerdict:
    ok: bool
    errors: List[FieldError] = field(default_factory=list)

    def merge(self, other: "ValidationVerdict") -> "ValidationVerdict":
        """Combine two verdicts, keeping this one's errors first."""
        errors = self.errors + other.errors
        return ValidationVerdict(ok=not errors, errors=errors)

    def error_list(self) -> List[dict]:
        return [e.to_dict() for e in self.errors]


@dataclass(frozen=True)
class TimeRange:
    start: str    # 12-hour clock, e.g. "09:00 AM"
    end: str


@dataclass(frozen=True)
class AppointmentDraft:
    """A booking submission that passed field-level validation."""
    doctor_id: str
    date: date
    time: TimeRange
    type: str
    chief_complaint: str
    mode: Optional[str] = None
    priority: Optional[str] = None
    symptoms: Tuple[str, ...] = ()
    additional_notes: Optional[str] = None


class GateState(str, Enum):
    LOADING = "loading"
    ALLOWED = "allowed"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_ROLE = "redirect_role"


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an access-gate evaluation."""
    state: GateState
    target: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.state is GateState.ALLOWED

    def to_dict(self) -> dict:
        return {"decision": self.state.value, "target": self.target}
