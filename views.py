# views.py
from flask import Blueprint, current_app, jsonify, redirect, request, send_from_directory
from flask_login import current_user

import auth
from auth import require_role
from services import get_services

bp = Blueprint("portal", __name__)

DEFAULT_ROUTINE = "Morning: Stretch 5 minutes\nMidday: Walk 10 minutes\nEvening: Unwind & journal"


def _form():
    return request.get_json(silent=True) or request.form


@bp.route("/")
def index():
    return redirect("/auth")


# Catalogue

@bp.route("/resources")
@require_role("student")
def resources():
    items = get_services().catalogue.list_resources(request.args.get("category"))
    return jsonify(resources=items, title="All Resources")


@bp.route("/resources/<resource_id>")
@require_role("student")
def resource_detail(resource_id):
    return jsonify(resource=get_services().catalogue.view_resource(resource_id))


@bp.route("/programs")
def programs():
    items = get_services().catalogue.list_resources("program")
    return jsonify(resources=items, title="Wellness Programs")


@bp.route("/health-tips")
def health_tips():
    # the page links to any counselling resource in the catalogue
    counseling = next(iter(get_services().catalogue.list_resources("mental-health")), None)
    return jsonify(counseling=counseling)


@bp.route("/doctors")
def doctors():
    return jsonify(doctors=get_services().catalogue.list_doctors())


@bp.route("/metrics")
def metrics():
    return jsonify(get_services().catalogue.metrics())


# Feedback

@bp.route("/feedback", methods=["POST"])
def submit_feedback():
    entry = get_services().feedback.submit(_form())
    return jsonify(feedback=entry, message="Thank you for your feedback"), 201


# Appointments

@bp.route("/appointments/request", methods=["POST"])
@require_role("student")
def request_appointment():
    data = _form()
    record = get_services().appointments.request_appointment(
        current_user,
        resource_id=data.get("resource_id") or None,
        doctor_id=data.get("doctor_id") or None,
        preferred_date=data.get("preferred_date"),
        preferred_time=data.get("preferred_time"),
        message=data.get("message", ""),
    )
    return jsonify(appointment=record,
                   message="Appointment requested. Awaiting confirmation."), 201


@bp.route("/student/appointments")
@require_role("student")
def my_appointments():
    items = get_services().appointments.list_requests(student_id=current_user.id)
    return jsonify(appointments=items)


# Student profile

@bp.route("/student/dashboard")
@require_role("student")
def student_dashboard():
    return jsonify(user=current_user.to_dict(),
                   routine=current_user.routine or DEFAULT_ROUTINE)


@bp.route("/student/profile")
@require_role("student")
def student_profile():
    lines = [line for line in (current_user.routine or "").split("\n") if line]
    return jsonify(user=current_user.to_dict(), routineLines=lines)


@bp.route("/student/profile/update", methods=["POST"])
@require_role("student")
def update_profile():
    data = _form()
    fields = {k: data.get(k, "") for k in ("full_name", "email", "routine", "phone", "programs", "age")}
    auth.update_profile(current_user, fields, request.files.get("avatar"))
    return redirect("/student/profile")


@bp.route("/profile")
def profile():
    role = auth.current_role()
    if role == "admin":
        return redirect("/admin")
    if role == "student":
        return redirect("/student/profile")
    return redirect("/auth")


@bp.route("/uploads/<path:filename>")
def uploads(filename):
    return send_from_directory(current_app.config["UPLOAD_DIR"], filename)
