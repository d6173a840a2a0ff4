"""
Role-Based Access Control – the navigation gate and API role checks.
"""

from typing import Collection, Optional

from medbook.config import LOGIN_PATH, ROLE_HOME_PATHS
from medbook.models import AccessDecision, GateState, Session
from medbook.responses import ApiError, AuthenticationError, AuthorizationError


def home_for(role: Optional[str]) -> str:
    """Dashboard path for *role*; unknown roles are sent to login."""
    return ROLE_HOME_PATHS.get(role, LOGIN_PATH)


def decide_access(session: Session, required_role: Optional[str] = None,
                  current_path: Optional[str] = None) -> AccessDecision:
    """Evaluate the gate for one navigation.

    Nothing is cached: routers call this again whenever the path or the
    required role changes. *current_path* does not influence the decision.
    """
    if not session.is_authenticated:
        return AccessDecision(GateState.REDIRECT_LOGIN, LOGIN_PATH)

    if required_role and session.role != required_role:
        return AccessDecision(GateState.REDIRECT_ROLE, home_for(session.role))

    return AccessDecision(GateState.ALLOWED, current_path)


def authorize(session: Session, allowed_roles: Collection[str] = ()) -> Optional[ApiError]:
    """Server-side counterpart of the gate: None if allowed, else the error to raise."""
    if not session.is_authenticated:
        return AuthenticationError("Access denied. Please log in.")
    if allowed_roles and session.role not in allowed_roles:
        return AuthorizationError(
            f"Access denied. {session.role} role is not authorized for this action."
        )
    return None
