# appointments.py
"""Appointment requests: pending -> approved | declined.

Students create requests, admins approve or decline them. Approved and
declined are terminal. Doctor and resource names are copied onto the record
when it is written so the queue still reads correctly after the catalogue
changes.
"""
import logging
import uuid
from datetime import date, datetime, timezone

from errors import (InvalidStateTransition, NotFound, Unauthenticated,
                    Unauthorized, ValidationError)

log = logging.getLogger(__name__)

PENDING = "pending"
APPROVED = "approved"
DECLINED = "declined"
STATUSES = (PENDING, APPROVED, DECLINED)


def _now():
    return datetime.now(timezone.utc).isoformat()


class AppointmentWorkflow:

    def __init__(self, store, catalogue):
        self.store = store
        self.catalogue = catalogue

    def request_appointment(self, student, resource_id=None, doctor_id=None,
                            preferred_date=None, preferred_time=None, message=""):
        """Create a pending request for the logged-in student.

        `student` is the session's account, never an id taken from the form.
        """
        if student is None or getattr(student, "role", None) != "student":
            raise Unauthenticated("student")
        if not (preferred_date and preferred_time):
            raise ValidationError("Please choose a date and time")
        try:
            date.fromisoformat(preferred_date)
        except ValueError:
            raise ValidationError("Invalid date")

        resource_title = None
        if resource_id:
            resource_title = self.catalogue.get_resource(resource_id).get("title")
        doctor_name = None
        if doctor_id:
            doctor_name = self.catalogue.resolve_doctor(doctor_id).get("name")

        record = {
            "id": str(uuid.uuid4()),
            "student_id": student.id,
            "student_username": student.username,
            "resource_id": resource_id or None,
            "resource_title": resource_title,
            "doctor_id": doctor_id or None,
            "doctor_name": doctor_name,
            "preferred_date": preferred_date,
            "preferred_time": preferred_time,
            "message": message or "",
            "status": PENDING,
            "created_at": _now(),
            "assigned_doctor_id": None,
            "assigned_doctor_name": None,
            "approved_by": None,
            "approved_at": None,
            "declined_by": None,
            "declined_at": None,
        }
        with self.store.mutate("appointments") as appointments:
            appointments.append(record)
        log.info("Appointment %s requested by %s", record["id"], student.username)
        return record

    def list_requests(self, status=None, student_id=None):
        items = self.store.read("appointments")
        if status:
            items = [a for a in items if a.get("status") == status]
        if student_id is not None:
            items = [a for a in items if a.get("student_id") == student_id]
        return sorted(items, key=lambda a: a.get("created_at") or "", reverse=True)

    def get_request(self, request_id):
        for a in self.store.read("appointments"):
            if a.get("id") == request_id:
                return a
        raise NotFound("Appointment request not found")

    def approve(self, admin, request_id, doctor_id=None):
        """Approve a pending request, optionally assigning a different doctor.

        Without a doctor override the doctor chosen by the student, if any,
        becomes the assigned doctor.
        """
        self._check_admin(admin)
        override = self.catalogue.resolve_doctor(doctor_id) if doctor_id else None

        with self.store.mutate("appointments") as appointments:
            record = self._pending(appointments, request_id)
            if override is not None:
                record["assigned_doctor_id"] = override.get("id")
                record["assigned_doctor_name"] = override.get("name")
            else:
                record["assigned_doctor_id"] = record.get("doctor_id")
                record["assigned_doctor_name"] = record.get("doctor_name")
            record["status"] = APPROVED
            record["approved_by"] = admin.username
            record["approved_at"] = _now()
        log.info("Appointment %s approved by %s", request_id, admin.username)
        return record

    def decline(self, admin, request_id):
        self._check_admin(admin)
        with self.store.mutate("appointments") as appointments:
            record = self._pending(appointments, request_id)
            record["status"] = DECLINED
            record["declined_by"] = admin.username
            record["declined_at"] = _now()
        log.info("Appointment %s declined by %s", request_id, admin.username)
        return record

    def counts(self):
        counts = dict.fromkeys(STATUSES, 0)
        for a in self.store.read("appointments"):
            status = a.get("status")
            if status in counts:
                counts[status] += 1
        return counts

    @staticmethod
    def _check_admin(admin):
        if admin is None or getattr(admin, "role", None) != "admin":
            raise Unauthorized()

    @staticmethod
    def _pending(appointments, request_id):
        for record in appointments:
            if record.get("id") == request_id:
                if record.get("status") != PENDING:
                    raise InvalidStateTransition(
                        f"Request is already {record.get('status')}")
                return record
        raise NotFound("Appointment request not found")
