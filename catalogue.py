# catalogue.py
import uuid

from errors import NotFound

PLACEHOLDER_IMAGE = "/static/images/placeholder.svg"

RESOURCE_FIELDS = ("title", "description", "category", "image", "link")


class Catalogue:
    """Resources and doctors, both stored as JSON collections."""

    def __init__(self, store):
        self.store = store

    # Resources

    def list_resources(self, category=None):
        resources = self.store.read("resources")
        if category:
            resources = [r for r in resources if r.get("category") == category]
        return resources

    def get_resource(self, resource_id):
        for r in self.store.read("resources"):
            if r.get("id") == resource_id:
                return r
        raise NotFound("Resource not found")

    def view_resource(self, resource_id):
        """Return the resource after counting one view. Every call counts."""
        with self.store.mutate("resources") as resources:
            for r in resources:
                if r.get("id") == resource_id:
                    r["views"] = (r.get("views") or 0) + 1
                    return dict(r)
            raise NotFound("Resource not found")

    def add_resource(self, fields):
        resource = {
            "id": str(uuid.uuid4()),
            "title": fields.get("title") or "Untitled",
            "description": fields.get("description") or "",
            "category": fields.get("category") or "general",
            "image": fields.get("image") or PLACEHOLDER_IMAGE,
            "link": fields.get("link") or "#",
            "views": 0,
        }
        with self.store.mutate("resources") as resources:
            resources.insert(0, resource)
        return resource

    def update_resource(self, resource_id, fields):
        with self.store.mutate("resources") as resources:
            for r in resources:
                if r.get("id") == resource_id:
                    # blank form fields keep what was there
                    for name in RESOURCE_FIELDS:
                        if fields.get(name):
                            r[name] = fields[name]
                    return dict(r)
            raise NotFound("Resource not found")

    def delete_resource(self, resource_id):
        with self.store.mutate("resources") as resources:
            remaining = [r for r in resources if r.get("id") != resource_id]
            if len(remaining) == len(resources):
                raise NotFound("Resource not found")
            resources[:] = remaining

    def metrics(self):
        resources = self.store.read("resources")
        return {
            "totalViews": sum(r.get("views") or 0 for r in resources),
            "resourceCount": len(resources),
        }

    # Doctors

    def list_doctors(self):
        return self.store.read("doctors")

    def resolve_doctor(self, doctor_id):
        for d in self.store.read("doctors"):
            if str(d.get("id")) == str(doctor_id):
                return d
        raise NotFound("Doctor not found")
