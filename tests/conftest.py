import pytest

from app import create_app
from auth import CAPTCHA_KEY
from models import db


@pytest.fixture
def app(tmp_path):
    data_dir = tmp_path / "data"
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "DATA_DIR": str(data_dir),
        "UPLOAD_DIR": str(tmp_path / "uploads"),
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'users.db'}",
        "ADMIN_USER": None,
        "ADMIN_PASS": None,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["portal"]


def captcha_answer(client, page="/auth"):
    client.get(page)
    with client.session_transaction() as sess:
        return sess[CAPTCHA_KEY]


def signup(client, username, password, role="student", **profile):
    data = {"username": username, "password": password, "role": role}
    data.update(profile)
    return client.post("/auth/signup", data=data)


def login(client, username, password, role="student", answer=None):
    if answer is None:
        answer = captcha_answer(client)
    return client.post("/auth/login", data={
        "username": username, "password": password, "role": role, "captcha": answer,
    })


def logout(client):
    return client.post("/logout")
