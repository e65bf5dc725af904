# services.py
from flask import current_app

from appointments import AppointmentWorkflow
from catalogue import Catalogue
from documents import DocumentStore
from feedback import FeedbackCollector


class Services:
    """Storage-backed services for one app instance, built before any request."""

    def __init__(self, data_dir, seed=True):
        self.store = DocumentStore(data_dir, seed=seed)
        self.catalogue = Catalogue(self.store)
        self.appointments = AppointmentWorkflow(self.store, self.catalogue)
        self.feedback = FeedbackCollector(self.store)

    def dashboard_summary(self):
        summary = self.catalogue.metrics()
        summary["feedback"] = self.feedback.summary()
        summary["appointments"] = self.appointments.counts()
        summary["logoutEvents"] = len(self.feedback.logout_events())
        return summary


def get_services():
    return current_app.extensions["portal"]
