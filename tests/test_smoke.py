import pytest
from werkzeug.security import generate_password_hash

from app.portal import auth, create_app
from app.portal.db import session_scope
from app.portal.models import AuditEvent, Base, Permission, Role, User


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    auth.login_throttle.reset()

    app = create_app()

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        p = Permission(key="admin.view", name="Admin: view shell")
        r = Role(key="admin", name="Administrator")
        r.permissions.append(p)
        u = User(email="admin@example.com", password_hash=generate_password_hash("pw"), is_active=True)
        u.roles.append(r)
        nobody = User(email="viewer@example.com", password_hash=generate_password_hash("pw"), is_active=True)
        s.add_all([p, r, u, nobody])

    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True


def test_healthz_ok(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_home_and_privacy_render(client):
    assert client.get("/").status_code == 200
    assert client.get("/privacy").status_code == 200


def test_login_and_admin_access(client):
    # Anonymous is sent to the login page
    r = client.get("/admin/")
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]

    # Login
    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"}, follow_redirects=False)
    assert r.status_code == 302

    # Now admin should be accessible
    r = client.get("/admin/")
    assert r.status_code == 200


def test_login_honours_local_next_only(client):
    r = client.post(
        "/auth/login",
        data={"email": "admin@example.com", "password": "pw", "next": "/admin/me"},
        follow_redirects=False,
    )
    assert r.headers["Location"].endswith("/admin/me")
    client.get("/auth/logout")

    r = client.post(
        "/auth/login",
        data={"email": "admin@example.com", "password": "pw", "next": "//evil.example.com/"},
        follow_redirects=False,
    )
    assert "evil.example.com" not in r.headers["Location"]


def test_bad_login_is_audited(app, client):
    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "nope"}, follow_redirects=True)
    assert r.status_code == 200
    assert b"Invalid login attempt." in r.data

    with session_scope(app) as s:
        ev = s.query(AuditEvent).filter(AuditEvent.action == "auth.login_failed").one()
        assert ev.entity_id == "admin@example.com"


def test_login_rate_limited(client):
    for _ in range(5):
        client.post("/auth/login", data={"email": "admin@example.com", "password": "nope"})
    r = client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"}, follow_redirects=True)
    assert b"Too many login attempts" in r.data
    assert client.get("/admin/").status_code == 302


def test_user_without_permission_gets_403(client):
    client.post("/auth/login", data={"email": "viewer@example.com", "password": "pw"})
    r = client.get("/admin/")
    assert r.status_code == 403
    assert b"admin.view" in r.data


def test_logout_ends_session(client):
    client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"})
    assert client.get("/admin/").status_code == 200
    r = client.get("/auth/logout")
    assert r.status_code == 302
    assert client.get("/admin/").status_code == 302


def test_register_is_disabled(client):
    r = client.get("/auth/register")
    assert r.status_code == 302
    assert "/auth/login" in r.headers["Location"]


def test_post_without_csrf_token_is_rejected(client):
    r = client.post("/contact", data={"full_name": "A"})
    assert r.status_code == 400


def test_unknown_path_is_404(client):
    r = client.get("/no-such-page")
    assert r.status_code == 404


def test_production_requires_server_database(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "a-strong-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'prod.db'}")
    monkeypatch.setenv("ENV", "production")
    with pytest.raises(RuntimeError):
        create_app()
