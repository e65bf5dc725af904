# config.py
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


def _flag(name, default="true"):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    SECRET_KEY = os.getenv("SESSION_SECRET") or "stuhealth_secret_dev"

    DATA_DIR = os.getenv("DATA_DIR") or os.path.join(basedir, "data")
    UPLOAD_DIR = os.getenv("UPLOAD_DIR") or os.path.join(basedir, "static", "uploads")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL") or \
        f"sqlite:///{os.path.join(DATA_DIR, 'users.db')}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    PERMANENT_SESSION_LIFETIME = timedelta(hours=int(os.getenv("SESSION_LIFETIME_HOURS") or 4))
    MAX_CONTENT_LENGTH = 2 * 1024 * 1024  # avatar uploads

    # initial admin, only used while no admin account exists
    ADMIN_USER = os.getenv("ADMIN_USER")
    ADMIN_PASS = os.getenv("ADMIN_PASS")

    CAPTCHA_ENABLED = _flag("CAPTCHA_ENABLED")
    SEED_DATA = _flag("SEED_DATA")
    LOG_LEVEL = os.getenv("LOG_LEVEL") or "INFO"
