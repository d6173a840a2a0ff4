"""
Flask route handlers for the REST API.
"""

import math
from datetime import datetime

from flask import current_app, g, jsonify, request
from werkzeug.security import check_password_hash, generate_password_hash

from medbook.access import decide_access
from medbook.appointments import find_conflict, parse_clock, validate_appointment
from medbook.config import (
    CANCELLABLE_STATUSES, DEFAULT_LIMIT, DEFAULT_MODE, DEFAULT_PAGE, DEFAULT_PRIORITY,
    DEFAULT_STATUS,
)
from medbook.api.auth import generate_token, read_session, revoke_token, roles_required, token_required
from medbook.responses import (
    AuthenticationError, AuthorizationError, NotFoundError, ValidationError, error_body, success_body,
)
from medbook.rules import is_object_id, parse_iso_date, to_int
from medbook.validator import clean, validate

PROFILE_FIELDS = ("firstName", "lastName", "phone")


# ── Helpers ──────────────────────────────────────────────────────────

def json_body() -> dict:
    if not request.is_json:
        raise ValidationError(message="Content-Type must be application/json")
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def check(rule_set: str, payload) -> dict:
    """Validate *payload* and return its cleaned copy, or raise ValidationError."""
    verdict = validate(rule_set, payload)
    if not verdict.ok:
        raise ValidationError.from_verdict(verdict)
    return clean(rule_set, payload)


def public_user(user: dict) -> dict:
    return {k: v for k, v in user.items() if k != "passwordHash"}


def paginate(items: list, args: dict):
    """Slice *items* by the (already validated) page/limit arguments."""
    page = to_int(args.get("page")) or DEFAULT_PAGE
    limit = to_int(args.get("limit")) or DEFAULT_LIMIT
    total = len(items)
    start = (page - 1) * limit
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
    }
    return items[start:start + limit], pagination


def appointment_sort_key(appt: dict):
    time = appt.get("appointmentTime") or {}
    day = parse_iso_date(appt.get("appointmentDate"))
    return (day.isoformat() if day else "", parse_clock(time.get("start")) or 0)


def register_routes(app, store):
    """Register all API routes on the Flask *app*."""

    def load_appointment(appointment_id: str) -> dict:
        """Fetch an appointment the current user takes part in (admins see all)."""
        if not is_object_id(appointment_id):
            raise ValidationError([{"field": "id", "message": "Invalid id"}])
        appt = store.get("appointments", appointment_id)
        if not appt:
            raise NotFoundError("Appointment")
        user = g.current_user
        if user["role"] != "admin" and user["id"] not in (appt["patient"], appt["doctor"]):
            raise AuthorizationError(
                "Access denied. You are not a participant in this appointment."
            )
        return appt

    # ── Health / info ────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    def index():
        return jsonify(success_body("MedBook Portal API", {
            "service": "MedBook Portal API",
            "version": "1.0.0",
            "endpoints": {
                "auth": "/api/auth",
                "users": "/api/users/profile",
                "appointments": "/api/appointments",
                "doctors": "/api/doctors",
                "access": "/api/access",
                "health": "/api/health",
            },
        })), 200

    @app.route("/api/health", methods=["GET"])
    def health():
        checks = {"database": store.ping()}
        healthy = all(checks.values())
        body = success_body("Service healthy", {"status": "healthy", "checks": checks})
        if not healthy:
            body = error_body("Service unhealthy")
        return jsonify(body), 200 if healthy else 503

    # ── Auth ─────────────────────────────────────────────────────────

    @app.route("/api/auth/register", methods=["POST"])
    def register():
        data = check("register", json_body())
        settings = current_app.config["SETTINGS"]

        if store.find("users", lambda u: u["email"] == data["email"]):
            raise ValidationError(message="User already exists with this email")

        user = {
            "email": data["email"],
            "passwordHash": generate_password_hash(data["password"]),
            "firstName": data["firstName"],
            "lastName": data["lastName"],
            "role": data["role"],
            "phone": data.get("phone"),
            "isActive": True,
        }
        if data["role"] == "doctor":
            user.update({
                "specialization": data.get("specialization"),
                "licenseNumber": data.get("licenseNumber"),
                "rating": {"average": 0, "count": 0},
            })
        user = store.create("users", user)
        print(f"[auth] Registered {user['role']} {user['id']}")

        token = generate_token(user, settings.secret_key, settings.token_expiry_hours)
        return jsonify(success_body("User registered successfully", {
            "token": token,
            "user": public_user(user),
        })), 201

    @app.route("/api/auth/login", methods=["POST"])
    def login():
        data = check("login", json_body())
        settings = current_app.config["SETTINGS"]

        matches = store.find("users", lambda u: u["email"] == data["email"])
        user = matches[0] if matches else None
        if not user or not check_password_hash(user["passwordHash"], data["password"]):
            raise AuthenticationError("Invalid credentials")
        if not user.get("isActive", True):
            raise AuthenticationError("Account has been deactivated")

        store.update("users", user["id"], {"lastLogin": datetime.utcnow().isoformat()})
        token = generate_token(user, settings.secret_key, settings.token_expiry_hours)
        return jsonify(success_body("Login successful", {
            "token": token,
            "user": public_user(user),
        })), 200

    @app.route("/api/auth/logout", methods=["POST"])
    @token_required
    def logout():
        if g.token_id:
            revoke_token(g.token_id, g.token_expires)
        return jsonify(success_body("Logged out successfully")), 200

    # ── Profile ──────────────────────────────────────────────────────

    @app.route("/api/users/profile", methods=["GET"])
    @token_required
    def get_profile():
        return jsonify(success_body("Profile retrieved", public_user(g.current_user))), 200

    @app.route("/api/users/profile", methods=["PUT"])
    @token_required
    def update_profile():
        data = check("update-profile", json_body())
        changes = {k: data[k] for k in PROFILE_FIELDS if data.get(k) is not None}
        user = store.update("users", g.current_user["id"], changes)
        if not user:
            raise NotFoundError("User")
        return jsonify(success_body("Profile updated successfully", public_user(user))), 200

    # ── Access gate ──────────────────────────────────────────────────

    @app.route("/api/access", methods=["GET"])
    def access():
        settings = current_app.config["SETTINGS"]
        session = read_session(request.headers, settings.secret_key)
        decision = decide_access(
            session,
            required_role=request.args.get("role") or None,
            current_path=request.args.get("path"),
        )
        return jsonify(success_body("Access evaluated", decision.to_dict())), 200

    # ── Appointments ─────────────────────────────────────────────────

    @app.route("/api/appointments", methods=["POST"])
    @token_required
    @roles_required("patient", "admin")
    def create_appointment():
        payload = json_body()
        verdict, draft = validate_appointment(payload)
        if not verdict.ok:
            raise ValidationError.from_verdict(verdict)

        doctor = store.get("users", draft.doctor_id)
        if not doctor or doctor["role"] != "doctor" or not doctor.get("isActive", True):
            raise ValidationError(message="Invalid doctor selected")

        booked = store.find("appointments", lambda a: a["doctor"] == draft.doctor_id)
        if find_conflict(draft, booked):
            raise ValidationError(message="Time slot is not available")

        appt = store.create("appointments", {
            "patient": g.current_user["id"],
            "doctor": draft.doctor_id,
            "appointmentDate": draft.date.isoformat(),
            "appointmentTime": {"start": draft.time.start, "end": draft.time.end},
            "type": draft.type,
            "mode": draft.mode or DEFAULT_MODE,
            "priority": draft.priority or DEFAULT_PRIORITY,
            "status": DEFAULT_STATUS,
            "symptoms": list(draft.symptoms),
            "chiefComplaint": draft.chief_complaint,
            "additionalNotes": draft.additional_notes,
        })
        print(f"[request] Appointment {appt['id']} booked with doctor {draft.doctor_id}")
        return jsonify(success_body("Appointment created successfully", appt)), 201

    @app.route("/api/appointments", methods=["GET"])
    @token_required
    def list_appointments():
        args = request.args.to_dict()
        check("pagination", args)
        if "status" in args:
            check("update-status", args)

        user = g.current_user

        def visible(appt):
            if user["role"] == "patient" and appt["patient"] != user["id"]:
                return False
            if user["role"] == "doctor" and appt["doctor"] != user["id"]:
                return False
            return "status" not in args or appt["status"] == args["status"]

        items = sorted(store.find("appointments", visible), key=appointment_sort_key)
        page, pagination = paginate(items, args)
        return jsonify(success_body("Appointments retrieved", page, pagination)), 200

    @app.route("/api/appointments/<appointment_id>", methods=["GET"])
    @token_required
    def get_appointment(appointment_id):
        appt = load_appointment(appointment_id)
        return jsonify(success_body("Appointment retrieved", appt)), 200

    @app.route("/api/appointments/<appointment_id>/status", methods=["PUT"])
    @token_required
    @roles_required("doctor", "admin")
    def update_status(appointment_id):
        appt = load_appointment(appointment_id)
        data = check("update-status", json_body())
        appt = store.update("appointments", appt["id"], {"status": data["status"]})
        return jsonify(success_body("Appointment status updated", appt)), 200

    @app.route("/api/appointments/<appointment_id>/cancel", methods=["PUT"])
    @token_required
    def cancel_appointment(appointment_id):
        appt = load_appointment(appointment_id)
        if appt["status"] not in CANCELLABLE_STATUSES:
            raise ValidationError(message="Appointment cannot be cancelled")
        data = request.get_json(silent=True) or {}
        appt = store.update("appointments", appt["id"], {
            "status": "cancelled",
            "cancellation": {
                "cancelledBy": g.current_user["id"],
                "reason": data.get("reason") if isinstance(data, dict) else None,
                "cancelledAt": datetime.utcnow().isoformat(),
            },
        })
        return jsonify(success_body("Appointment cancelled successfully", appt)), 200

    @app.route("/api/appointments/<appointment_id>/rate", methods=["PUT"])
    @token_required
    @roles_required("patient")
    def rate_appointment(appointment_id):
        appt = load_appointment(appointment_id)
        data = check("rate-appointment", json_body())

        if appt["status"] != "completed":
            raise ValidationError(message="Can only rate completed appointments")
        if appt.get("patientRating"):
            raise ValidationError(message="Appointment already rated")

        appt = store.update("appointments", appt["id"], {
            "patientRating": {
                "rating": data["rating"],
                "feedback": data.get("feedback"),
                "ratedAt": datetime.utcnow().isoformat(),
            },
        })

        doctor = store.get("users", appt["doctor"])
        if doctor:
            rating = doctor.get("rating") or {"average": 0, "count": 0}
            count = rating["count"] + 1
            average = (rating["average"] * rating["count"] + data["rating"]) / count
            store.update("users", doctor["id"], {
                "rating": {"average": round(average, 2), "count": count},
            })

        return jsonify(success_body("Rating submitted successfully", appt)), 200

    # ── Doctors ──────────────────────────────────────────────────────

    @app.route("/api/doctors", methods=["GET"])
    @token_required
    def list_doctors():
        args = request.args.to_dict()
        check("pagination", args)
        doctors = store.find(
            "users", lambda u: u["role"] == "doctor" and u.get("isActive", True),
        )
        page, pagination = paginate([public_user(d) for d in doctors], args)
        return jsonify(success_body("Doctors retrieved", page, pagination)), 200
