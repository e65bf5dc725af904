# admin_routes.py
from flask import Blueprint, jsonify, redirect, request
from flask_login import current_user

from auth import require_role
from services import get_services

bp = Blueprint("admin", __name__, url_prefix="/admin")


def _form():
    return request.get_json(silent=True) or request.form


@bp.route("")
@require_role("admin")
def dashboard():
    services = get_services()
    return jsonify(summary=services.dashboard_summary(),
                   resources=services.catalogue.list_resources())


@bp.route("/metrics")
@require_role("admin")
def metrics():
    catalogue = get_services().catalogue
    views = [{"id": r.get("id"), "title": r.get("title"), "views": r.get("views") or 0}
             for r in catalogue.list_resources()]
    return jsonify(resources=views, **catalogue.metrics())


# Resource management

@bp.route("/edit/<resource_id>")
@require_role("admin")
def edit_resource(resource_id):
    return jsonify(resource=get_services().catalogue.get_resource(resource_id))


@bp.route("/add", methods=["POST"])
@require_role("admin")
def add_resource():
    get_services().catalogue.add_resource(_form())
    return redirect("/admin")


@bp.route("/update/<resource_id>", methods=["POST"])
@require_role("admin")
def update_resource(resource_id):
    get_services().catalogue.update_resource(resource_id, _form())
    return redirect("/admin")


@bp.route("/delete/<resource_id>", methods=["POST"])
@require_role("admin")
def delete_resource(resource_id):
    get_services().catalogue.delete_resource(resource_id)
    return redirect("/admin")


# Appointment review

@bp.route("/appointments")
@require_role("admin")
def appointments():
    services = get_services()
    items = services.appointments.list_requests(status=request.args.get("status") or None)
    return jsonify(appointments=items, doctors=services.catalogue.list_doctors())


@bp.route("/appointments/<request_id>")
@require_role("admin")
def appointment_detail(request_id):
    return jsonify(appointment=get_services().appointments.get_request(request_id))


@bp.route("/appointments/approve/<request_id>", methods=["POST"])
@require_role("admin")
def approve(request_id):
    doctor_id = _form().get("doctor_id") or None
    record = get_services().appointments.approve(current_user, request_id, doctor_id)
    return jsonify(appointment=record)


@bp.route("/appointments/decline/<request_id>", methods=["POST"])
@require_role("admin")
def decline(request_id):
    record = get_services().appointments.decline(current_user, request_id)
    return jsonify(appointment=record)


# Feedback review

@bp.route("/feedback")
@require_role("admin")
def feedback():
    return jsonify(feedback=get_services().feedback.list())


@bp.route("/feedback/<feedback_id>/resolve", methods=["POST"])
@require_role("admin")
def resolve_feedback(feedback_id):
    value = str(_form().get("resolved", "true")).lower() in ("1", "true", "yes", "on")
    return jsonify(feedback=get_services().feedback.set_resolved(feedback_id, value))


@bp.route("/feedback/<feedback_id>/delete", methods=["POST"])
@require_role("admin")
def delete_feedback(feedback_id):
    get_services().feedback.delete(feedback_id)
    return redirect("/admin/feedback")


@bp.route("/logout-events")
@require_role("admin")
def logout_events():
    return jsonify(events=get_services().feedback.logout_events())
