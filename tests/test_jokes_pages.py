"""Tests for the jokes index, detail and delete pages."""
from urllib.parse import parse_qs, urlsplit

import pytest
from werkzeug.security import generate_password_hash

from app.jokes import auth as auth_module
from app.jokes import create_app
from app.jokes.db import session_scope
from app.jokes.models import Base, User
from app.jokes.modules.jokes.models import Joke

CSRF = "test-csrf-token"


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    auth_module._login_attempts.clear()

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    with session_scope(app) as s:
        kody = User(username="kody", password_hash=generate_password_hash("twixrox"))
        other = User(username="hannah", password_hash=generate_password_hash("hunter22"))
        s.add_all([kody, other])
        s.flush()
        s.add(Joke(name="Frisbee", content="I was wondering why the frisbee was getting bigger, then it hit me.", jokester_id=kody.id))

    return app.test_client()


def _login(client, username="kody", password="twixrox"):
    r = client.post("/login", data={"loginType": "login", "username": username, "password": password})
    assert r.status_code == 302


def _csrf(client) -> str:
    with client.session_transaction() as sess:
        sess["csrf_token"] = CSRF
    return CSRF


def _joke_id(client) -> str:
    with session_scope(client.application) as s:
        return s.query(Joke.id).filter(Joke.name == "Frisbee").scalar()


def test_index_lists_jokes(client):
    r = client.get("/jokes")
    assert r.status_code == 200
    assert b"Frisbee" in r.data
    assert f"/jokes/{_joke_id(client)}".encode() in r.data
    assert b'href="/jokes/new"' in r.data


def test_landing_page_links_latest_joke(client):
    r = client.get("/")
    assert r.status_code == 200
    assert b"Frisbee" in r.data


def test_detail_renders_joke(client):
    r = client.get(f"/jokes/{_joke_id(client)}")
    assert r.status_code == 200
    assert b"then it hit me." in r.data
    assert b"By kody" in r.data
    assert b'value="delete"' not in r.data


def test_detail_unknown_joke_is_404(client):
    r = client.get("/jokes/does-not-exist")
    assert r.status_code == 404
    assert b"No such joke." in r.data


def test_owner_sees_delete_button_and_can_delete(client):
    joke_id = _joke_id(client)
    _login(client)
    r = client.get(f"/jokes/{joke_id}")
    assert b'value="delete"' in r.data

    token = _csrf(client)
    r = client.post(f"/jokes/{joke_id}", data={"intent": "delete", "csrf_token": token})
    assert r.status_code == 302
    assert r.headers["Location"] == "/jokes"
    assert _joke_id(client) is None


def test_non_owner_cannot_delete(client):
    joke_id = _joke_id(client)
    _login(client, "hannah", "hunter22")
    token = _csrf(client)
    r = client.post(f"/jokes/{joke_id}", data={"intent": "delete", "csrf_token": token})
    assert r.status_code == 403
    assert _joke_id(client) == joke_id


def test_delete_requires_login(client):
    joke_id = _joke_id(client)
    token = _csrf(client)
    r = client.post(f"/jokes/{joke_id}", data={"intent": "delete", "csrf_token": token})
    assert r.status_code == 302
    location = urlsplit(r.headers["Location"])
    assert location.path == "/login"
    assert parse_qs(location.query) == {"redirectTo": [f"/jokes/{joke_id}"]}
    assert _joke_id(client) == joke_id


def test_unknown_intent_is_bad_request(client):
    joke_id = _joke_id(client)
    _login(client)
    token = _csrf(client)
    r = client.post(f"/jokes/{joke_id}", data={"intent": "publish", "csrf_token": token})
    assert r.status_code == 400
