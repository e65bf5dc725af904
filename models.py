# models.py
import logging
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy import inspect, text

db = SQLAlchemy()
log = logging.getLogger(__name__)

ROLES = ("student", "admin")

PROFILE_FIELDS = ("full_name", "email", "routine", "phone", "programs", "age")


class User(UserMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False)
    password = db.Column(db.String(200), nullable=False)  # hashed
    role = db.Column(db.String(20), nullable=False)       # 'student' or 'admin'
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # added by MIGRATIONS on databases created before the profile page existed
    full_name = db.Column(db.Text)
    email = db.Column(db.Text)
    routine = db.Column(db.Text)
    avatar = db.Column(db.Text)
    phone = db.Column(db.Text)
    programs = db.Column(db.Text)
    age = db.Column(db.Integer)

    def get_id(self):
        # role is part of the session identity so a reloaded session keeps it
        return f"{self.role}:{self.id}"

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "full_name": self.full_name,
            "email": self.email,
            "routine": self.routine,
            "avatar": self.avatar,
            "phone": self.phone,
            "programs": self.programs,
            "age": self.age,
        }


# Ordered, additive. Each entry is applied once, only when its column is missing.
MIGRATIONS = [
    ("full_name", "ALTER TABLE users ADD COLUMN full_name TEXT"),
    ("email", "ALTER TABLE users ADD COLUMN email TEXT"),
    ("routine", "ALTER TABLE users ADD COLUMN routine TEXT"),
    ("avatar", "ALTER TABLE users ADD COLUMN avatar TEXT"),
    ("phone", "ALTER TABLE users ADD COLUMN phone TEXT"),
    ("programs", "ALTER TABLE users ADD COLUMN programs TEXT"),
    ("age", "ALTER TABLE users ADD COLUMN age INTEGER"),
]


def apply_migrations():
    """Bring an existing users table up to date. Returns the columns added."""
    existing = {c["name"] for c in inspect(db.engine).get_columns("users")}
    added = []
    with db.engine.begin() as conn:
        for column, ddl in MIGRATIONS:
            if column in existing:
                continue
            conn.execute(text(ddl))
            existing.add(column)
            added.append(column)
    if added:
        log.info("Added user columns: %s", ", ".join(added))
    return added


def init_db():
    db.create_all()
    return apply_migrations()
