# auth.py
"""Session/auth gate: math CAPTCHA, login, signup, role checks and logout.

The session is bound to one account through Flask-Login. Accounts are
looked up by (username, role) together, so choosing the wrong role on the
login form fails even with the right password.
"""
import logging
import os
import random
import uuid
from functools import wraps

from flask import current_app, session
from flask_login import LoginManager, current_user, login_user, logout_user
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash
from werkzeug.utils import secure_filename

from errors import (CaptchaMismatch, InvalidCredentials, StorageError,
                    Unauthenticated, Unauthorized, UsernameTaken, ValidationError)
from models import PROFILE_FIELDS, ROLES, User, db

log = logging.getLogger(__name__)

login_manager = LoginManager()

HOME_PAGES = {"student": "/resources", "admin": "/admin"}
LOGIN_PAGES = {"student": "/student/login", "admin": "/admin/login"}

CAPTCHA_KEY = "captcha_answer"
AVATAR_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


@login_manager.user_loader
def load_user(session_id):
    role, _, user_id = session_id.partition(":")
    try:
        user = db.session.get(User, int(user_id))
    except ValueError:
        return None
    if user is None or user.role != role:
        return None
    return user


def home_for(role):
    return HOME_PAGES.get(role, "/auth")


def login_page_for(role):
    return LOGIN_PAGES.get(role, "/auth")


def current_role():
    if current_user.is_authenticated:
        return current_user.role
    return None


# CAPTCHA

def issue_challenge():
    """Store a fresh arithmetic challenge in the session and return its text."""
    a = random.randint(1, 10)
    b = random.randint(1, 10)
    op = random.choice("+-")
    answer = a + b if op == "+" else a - b
    session[CAPTCHA_KEY] = str(answer)
    return f"What is {a} {op} {b}?"


def check_challenge(answer):
    # single use: the stored answer is gone whether or not this matches
    expected = session.pop(CAPTCHA_KEY, None)
    if not current_app.config.get("CAPTCHA_ENABLED", True):
        return
    submitted = "" if answer is None else str(answer)
    if expected is None or submitted.strip() != expected:
        raise CaptchaMismatch()


# Sessions

def _bind_session(user):
    logout_user()
    session.clear()
    session.permanent = True
    login_user(user)


def require_role(role):
    """Route decorator: the session must be bound to an account with `role`."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if current_role() != role:
                raise Unauthenticated(role)
            return view(*args, **kwargs)
        return wrapped
    return decorator


def authenticate(username, password, role):
    user = User.query.filter_by(username=username, role=role).first()
    if user is None or not check_password_hash(user.password, password):
        raise InvalidCredentials()
    return user


def login(username, password, role, challenge_answer):
    """Check the CAPTCHA and credentials, bind the session, return the home page."""
    check_challenge(challenge_answer)
    role = role or "student"
    if not username or not password:
        raise ValidationError("Missing credentials")
    try:
        user = authenticate(username, password, role)
    except InvalidCredentials:
        log.info('Login attempt user="%s" role=%s success=false', username, role)
        raise
    _bind_session(user)
    log.info('Login attempt user="%s" role=%s success=true', username, role)
    return home_for(user.role)


# Accounts

def admin_exists():
    return User.query.filter_by(role="admin").first() is not None


def create_account(username, password, role, profile=None):
    if not username or not password:
        raise ValidationError("Username and password required")
    if role not in ROLES:
        raise ValidationError("Unknown role")
    if User.query.filter_by(username=username).first() is not None:
        raise UsernameTaken()

    user = User(username=username, password=generate_password_hash(password), role=role)
    _apply_profile(user, profile or {})
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # lost a race with a concurrent signup for the same name
        db.session.rollback()
        raise UsernameTaken()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.error("Could not create account %s: %s", username, e)
        raise StorageError("Could not create account")
    log.info("Created %s account %s", role, username)
    return user


def signup(username, password, role, profile=None):
    """Create an account and log the session into it.

    Once an admin exists, further admin accounts can only be created from an
    admin session; in that case the creating admin stays logged in.
    """
    role = role or "student"
    acting_admin = current_role() == "admin"
    if role == "admin" and admin_exists() and not acting_admin:
        raise Unauthorized("Admin accounts can only be created by an admin")
    user = create_account(username, password, role, profile)
    if not (role == "admin" and acting_admin):
        _bind_session(user)
    return user


def logout(feedback, origin=None):
    """Record a logout event, then clear the session.

    A failure to record the event is logged and never keeps the session alive.
    """
    username = current_user.username if current_user.is_authenticated else None
    role = current_role() or "guest"
    try:
        feedback.record_logout(username, role, origin)
    except Exception:
        log.exception("Could not record logout event for %s", username or "guest")
    logout_user()
    session.clear()


# Profile

def _apply_profile(user, fields):
    values = {name: fields.get(name) or "" for name in PROFILE_FIELDS if name in fields}
    if "age" in values:
        try:
            values["age"] = int(values["age"]) if values["age"] != "" else None
        except (TypeError, ValueError):
            raise ValidationError("Age must be a number")
    for name, value in values.items():
        setattr(user, name, value)


def update_profile(user, fields, avatar=None):
    _apply_profile(user, fields)
    if avatar is not None and avatar.filename:
        user.avatar = save_avatar(avatar)
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        log.error("Profile update failed for %s: %s", user.username, e)
        raise StorageError("Could not save profile")
    return user


def save_avatar(upload):
    ext = os.path.splitext(secure_filename(upload.filename))[1].lower() or ".jpg"
    if ext not in AVATAR_EXTENSIONS:
        raise ValidationError("Avatar must be an image")
    upload_dir = current_app.config["UPLOAD_DIR"]
    name = f"{uuid.uuid4().hex}{ext}"
    try:
        os.makedirs(upload_dir, exist_ok=True)
        upload.save(os.path.join(upload_dir, name))
    except OSError as e:
        log.error("Avatar upload failed: %s", e)
        raise StorageError("Could not save avatar")
    return "/uploads/" + name


def bootstrap_admin(username, password):
    """Create the first admin from configuration when none exists yet."""
    if not (username and password) or admin_exists():
        return None
    try:
        user = create_account(username, password, "admin")
    except UsernameTaken:
        log.warning("Initial admin %s not created: username taken", username)
        return None
    log.info("Initial admin user created from configuration")
    return user
