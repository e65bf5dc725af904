# feedback.py
import logging
import uuid
from datetime import datetime, timezone

from errors import NotFound, ValidationError

log = logging.getLogger(__name__)

URGENCIES = ("low", "medium", "high")


def _now():
    return datetime.now(timezone.utc).isoformat()


def normalize_urgency(value):
    value = str(value or "").strip().lower()
    return value if value in URGENCIES else "low"


def normalize_rating(value):
    """Ratings are whole numbers 1-5; anything else is dropped."""
    try:
        rating = int(value)
    except (TypeError, ValueError):
        return None
    return rating if 1 <= rating <= 5 else None


class FeedbackCollector:
    """Feedback entries and the logout audit trail."""

    def __init__(self, store):
        self.store = store

    def submit(self, fields):
        message = str(fields.get("message") or "").strip()
        if not message:
            raise ValidationError("Message is required")
        entry = {
            "id": str(uuid.uuid4()),
            "name": fields.get("name") or None,
            "email": fields.get("email") or None,
            "message": message,
            "rating": normalize_rating(fields.get("rating")),
            "category": fields.get("category") or "general",
            "urgency": normalize_urgency(fields.get("urgency")),
            "resolved": False,
            "created_at": _now(),
        }
        with self.store.mutate("feedback") as entries:
            entries.insert(0, entry)
        return entry

    def list(self, resolved=None):
        entries = self.store.read("feedback")
        if resolved is not None:
            entries = [e for e in entries if bool(e.get("resolved")) == resolved]
        return entries

    def set_resolved(self, feedback_id, resolved=True):
        with self.store.mutate("feedback") as entries:
            for e in entries:
                if e.get("id") == feedback_id:
                    e["resolved"] = bool(resolved)
                    return dict(e)
            raise NotFound("Feedback not found")

    def delete(self, feedback_id):
        with self.store.mutate("feedback") as entries:
            remaining = [e for e in entries if e.get("id") != feedback_id]
            if len(remaining) == len(entries):
                raise NotFound("Feedback not found")
            entries[:] = remaining

    def record_logout(self, username, role, origin):
        event = {
            "id": str(uuid.uuid4()),
            "username": username,
            "role": role,
            "ip": origin,
            "timestamp": _now(),
        }
        with self.store.mutate("logout_events") as events:
            events.append(event)
        return event

    def logout_events(self):
        return self.store.read("logout_events")

    def summary(self):
        entries = self.store.read("feedback")
        by_urgency = dict.fromkeys(URGENCIES, 0)
        for e in entries:
            by_urgency[normalize_urgency(e.get("urgency"))] += 1
        return {
            "total": len(entries),
            "unresolved": sum(1 for e in entries if not e.get("resolved")),
            "by_urgency": by_urgency,
        }
