"""
Unit tests for the access gate and server-side role authorization.
"""

import pytest

from medbook.access import authorize, decide_access, home_for
from medbook.models import AccessDecision, GateState, Session
from medbook.responses import AuthenticationError, AuthorizationError


# ── Tests: decide_access ─────────────────────────────────────────────

@pytest.mark.parametrize("role", [None, "patient", "doctor", "admin"])
def test_missing_token_redirects_to_login_regardless_of_role(role):
    decision = decide_access(Session(token=None, role=role), required_role="patient")
    assert decision.state is GateState.REDIRECT_LOGIN
    assert decision.target == "/auth/login"


def test_token_without_role_redirects_to_login():
    decision = decide_access(Session(token="t", role=None))
    assert decision.state is GateState.REDIRECT_LOGIN


def test_wrong_role_redirects_to_own_dashboard():
    decision = decide_access(Session(token="t", role="doctor"), required_role="patient")
    assert decision.state is GateState.REDIRECT_ROLE
    assert decision.target == "/doctor"


def test_unknown_role_redirects_to_login_page():
    decision = decide_access(Session(token="t", role="nurse"), required_role="doctor")
    assert decision.state is GateState.REDIRECT_ROLE
    assert decision.target == "/auth/login"


def test_matching_role_allowed():
    decision = decide_access(Session(token="t", role="patient"), "patient", "/patient/book")
    assert decision.allowed
    assert decision.to_dict() == {"decision": "allowed", "target": "/patient/book"}


def test_no_required_role_allows_any_authenticated_session():
    assert decide_access(Session(token="t", role="admin"), None, "/summaries").allowed


def test_decision_recomputed_per_path():
    session = Session(token="t", role="admin")
    assert decide_access(session, "admin", "/admin").allowed
    assert decide_access(session, "doctor", "/doctor").target == "/admin"


def test_loading_is_not_allowed():
    assert not AccessDecision(GateState.LOADING).allowed


def test_home_for_mapping():
    assert home_for("patient") == "/patient"
    assert home_for("doctor") == "/doctor"
    assert home_for("admin") == "/admin"
    assert home_for(None) == "/auth/login"


# ── Tests: authorize ─────────────────────────────────────────────────

def test_authorize_unauthenticated_is_401():
    error = authorize(Session(), ("admin",))
    assert isinstance(error, AuthenticationError)
    assert error.status_code == 401


def test_authorize_wrong_role_is_403():
    error = authorize(Session(token="t", role="patient"), ("doctor", "admin"))
    assert isinstance(error, AuthorizationError)
    assert error.message == "Access denied. patient role is not authorized for this action."


def test_authorize_allowed():
    assert authorize(Session(token="t", role="doctor"), ("doctor",)) is None
    assert authorize(Session(token="t", role="doctor")) is None
