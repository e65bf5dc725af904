# documents.py
"""Flat JSON document collections.

Each collection lives in its own file, shaped ``{key: [records...]}``, and is
rewritten wholesale on every mutation. Mutations go through ``mutate()``,
which holds the collection's lock for the whole read-modify-write cycle and
swaps the file in with ``os.replace`` so readers never see a partial write.
"""
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager

from errors import StorageError

log = logging.getLogger(__name__)

# collection name -> (file name, top-level key)
COLLECTIONS = {
    "resources": ("resources.json", "resources"),
    "doctors": ("doctors.json", "doctors"),
    "feedback": ("feedback.json", "feedback"),
    "appointments": ("appointments.json", "appointments"),
    "logout_events": ("logout_events.json", "events"),
}

DEFAULT_DOCTORS = [
    {"id": "d1", "name": "Dr. Asha Mehta", "title": "General Physician"},
    {"id": "d2", "name": "Dr. Daniel Okafor", "title": "Counselling Psychologist"},
    {"id": "d3", "name": "Dr. Lena Park", "title": "Sports Medicine"},
]

DEFAULT_RESOURCES = [
    {
        "id": "r1",
        "title": "Managing Exam Stress",
        "description": "Practical techniques for staying calm during exam season.",
        "category": "mental-health",
        "image": "/static/images/placeholder.svg",
        "link": "#",
        "views": 0,
    },
    {
        "id": "r2",
        "title": "Morning Yoga Programme",
        "description": "A four-week beginner yoga programme run by campus wellness.",
        "category": "program",
        "image": "/static/images/placeholder.svg",
        "link": "#",
        "views": 0,
    },
]

SEEDS = {"doctors": DEFAULT_DOCTORS, "resources": DEFAULT_RESOURCES}


class DocumentStore:

    def __init__(self, data_dir, seed=True):
        self.data_dir = data_dir
        self._locks = {name: threading.Lock() for name in COLLECTIONS}
        try:
            os.makedirs(data_dir, exist_ok=True)
            for name in COLLECTIONS:
                if not os.path.exists(self._path(name)):
                    records = SEEDS.get(name, []) if seed else []
                    self._write(name, [dict(r) for r in records])
        except OSError as e:
            raise StorageError() from e

    def _path(self, name):
        return os.path.join(self.data_dir, COLLECTIONS[name][0])

    def _load(self, name, strict=False):
        """Read a collection. A corrupt file reads as empty unless `strict`,
        in which case it raises StorageError and the file is left as it is.
        """
        key = COLLECTIONS[name][1]
        path = self._path(name)
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return []
        except json.JSONDecodeError:
            data = None
        except OSError as e:
            raise StorageError() from e
        if not isinstance(data, dict) or not isinstance(data.get(key) or [], list):
            if strict:
                log.error("Refusing to overwrite unreadable %s", path)
                raise StorageError()
            log.warning("Unreadable %s, treating as empty", path)
            return []
        return list(data.get(key) or [])

    def _write(self, name, records):
        key = COLLECTIONS[name][1]
        fd, tmp = tempfile.mkstemp(dir=self.data_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump({key: records}, fh, indent=2)
            os.replace(tmp, self._path(name))
        except OSError as e:
            if os.path.exists(tmp):
                os.remove(tmp)
            log.error("Failed to write %s: %s", name, e)
            raise StorageError() from e

    def read(self, name):
        with self._locks[name]:
            return self._load(name)

    @contextmanager
    def mutate(self, name):
        """Yield the collection's records; the list is saved on clean exit.

        If the block raises, nothing is written. A corrupt file raises
        StorageError before the block runs, so it is never written over.
        """
        with self._locks[name]:
            records = self._load(name, strict=True)
            yield records
            self._write(name, records)
