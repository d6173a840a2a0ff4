"""
Centralised configuration constants and environment helpers.
"""

import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

# ── Roles / enumerations ─────────────────────────────────────────────
ROLES = ("patient", "doctor", "admin")

APPOINTMENT_TYPES = (
    "consultation", "follow-up", "emergency", "routine-checkup", "specialist-referral",
)
APPOINTMENT_MODES = ("in-person", "telemedicine", "phone")
PRIORITIES = ("low", "medium", "high", "urgent")
APPOINTMENT_STATUSES = (
    "scheduled", "confirmed", "in-progress", "completed",
    "cancelled", "no-show", "rescheduled",
)

# Statuses that still occupy a doctor's time slot
ACTIVE_STATUSES = {"scheduled", "confirmed", "in-progress"}
CANCELLABLE_STATUSES = {"scheduled", "confirmed"}

DEFAULT_MODE = "in-person"
DEFAULT_PRIORITY = "medium"
DEFAULT_STATUS = "scheduled"

# ── Navigation targets ───────────────────────────────────────────────
LOGIN_PATH = "/auth/login"
ROLE_HOME_PATHS = {
    "patient": "/patient",
    "doctor": "/doctor",
    "admin": "/admin",
}

# ── Pagination ───────────────────────────────────────────────────────
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# ── API server ───────────────────────────────────────────────────────
DEV_SECRET_KEY = "dev-secret-key-change-in-production"
DEV_DB_URI = "sqlite:///medbook.db"
DEV_FRONTEND_URL = "http://localhost:3000"


@dataclass
class Settings:
    """Host-environment settings consumed by the API server."""
    env: str
    host: str
    port: int
    db_uri: str
    secret_key: str
    token_expiry_hours: int
    frontend_url: str

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value


def load_settings() -> Settings:
    """Read settings from the environment.

    Defaults are only applied outside production; a production process
    without DB_URI, JWT_SECRET_KEY or FRONTEND_URL exits at startup.
    """
    env = os.getenv("APP_ENV", "development").strip().lower()

    if env == "production":
        db_uri = get_env("DB_URI")
        secret_key = get_env("JWT_SECRET_KEY")
        frontend_url = get_env("FRONTEND_URL")
    else:
        db_uri = os.getenv("DB_URI", DEV_DB_URI)
        secret_key = os.getenv("JWT_SECRET_KEY", DEV_SECRET_KEY)
        frontend_url = os.getenv("FRONTEND_URL", DEV_FRONTEND_URL)

    return Settings(
        env=env,
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        db_uri=db_uri,
        secret_key=secret_key,
        token_expiry_hours=int(os.getenv("JWT_EXPIRY_HOURS", "168")),
        frontend_url=frontend_url,
    )
