from __future__ import annotations
import pytest

from app import create_app
from extensions import db
from models import Role, User


@pytest.fixture()
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        for email, role in (("admin@example.com", Role.ADMIN), ("teacher@example.com", Role.TEACHER),
                            ("student@example.com", Role.STUDENT)):
            u = User(email=email, role=role.value, is_active=True)
            u.set_password("pass")
            db.session.add(u)
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def login_as(client, email: str, password: str = "pass"):
    r = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.get_json()
    return r.get_json()["user"]


@pytest.fixture()
def admin_client(client):
    login_as(client, "admin@example.com")
    return client


@pytest.fixture()
def teacher_client(client):
    login_as(client, "teacher@example.com")
    return client
