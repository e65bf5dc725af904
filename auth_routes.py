# auth_routes.py
from flask import Blueprint, jsonify, redirect, request
from flask_login import current_user

import auth
from errors import PortalError
from services import get_services

bp = Blueprint("auth", __name__)


def _form():
    return request.get_json(silent=True) or request.form


def _profile(data):
    return {k: data.get(k) for k in ("full_name", "email", "phone", "age", "routine", "programs")
            if data.get(k) not in (None, "")}


def _render(active, error=None, status=200, **extra):
    """Stand-in for the auth page: the form state plus a fresh challenge."""
    body = {"active": active, "error": error, "captcha": auth.issue_challenge()}
    body.update(extra)
    return jsonify(body), status


def _login(role, target=None):
    data = _form()
    try:
        home = auth.login(
            str(data.get("username") or "").strip(),
            str(data.get("password") or ""),
            role or data.get("role") or "student",
            data.get("captcha"),
        )
    except PortalError as e:
        return _render("login", e.message, e.status_code)
    return redirect(target or home)


def _signup(role, target=None):
    data = _form()
    role = role or data.get("role") or "student"
    try:
        user = auth.signup(
            str(data.get("username") or "").strip(),
            str(data.get("password") or ""),
            role,
            _profile(data),
        )
    except PortalError as e:
        return _render("signup", e.message, e.status_code)
    return redirect(target or auth.home_for(user.role))


# Unified login/signup

@bp.route("/auth", methods=["GET"])
@bp.route("/auth/login", methods=["GET"])
def auth_page():
    return _render("login")


@bp.route("/auth/signup", methods=["GET"])
def signup_page():
    return _render("signup")


@bp.route("/auth/login", methods=["POST"])
def unified_login():
    return _login(None)


@bp.route("/auth/signup", methods=["POST"])
def unified_signup():
    return _signup(None)


# Student-only

@bp.route("/student/login", methods=["GET", "POST"])
def student_login():
    if request.method == "POST":
        return _login("student", "/student/dashboard")
    return _render("login", role="student")


@bp.route("/student/signup", methods=["GET", "POST"])
def student_signup():
    if request.method == "POST":
        return _signup("student", "/student/dashboard")
    return _render("signup", role="student")


# Admin-only

@bp.route("/admin/login", methods=["GET", "POST"])
def admin_login():
    if request.method == "POST":
        return _login("admin")
    return _render("login", role="admin")


@bp.route("/admin/signup", methods=["GET", "POST"])
def admin_signup():
    if request.method == "POST":
        return _signup("admin", "/admin")
    return _render("signup", role="admin", open=not auth.admin_exists())


@bp.route("/logout", methods=["GET"])
@bp.route("/admin/logout", methods=["GET"])
def logout_confirm():
    username = current_user.username if current_user.is_authenticated else None
    return jsonify(confirm=True, username=username, role=auth.current_role())


@bp.route("/logout", methods=["POST"])
@bp.route("/admin/logout", methods=["POST"])
def logout():
    auth.logout(get_services().feedback, request.remote_addr)
    return redirect("/")
