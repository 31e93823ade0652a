"""Tests for content pages (admin CRUD + public slug routing)."""
import pytest
from werkzeug.security import generate_password_hash

from app.portal import auth, create_app
from app.portal.db import session_scope
from app.portal.models import AuditEvent, Base, Permission, Role, User
from app.portal.modules.pages.models import Page


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
        r = Role(key="admin", name="Administrator")
        for key in ("admin.view", "pages.view", "pages.create", "pages.edit", "pages.delete"):
            r.permissions.append(Permission(key=key, name=key))
        u = User(email="admin@example.com", password_hash=generate_password_hash("pw"), is_active=True)
        u.roles.append(r)
        s.add_all([r, u])

    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def _login(client):
    client.post("/auth/login", data={"email": "admin@example.com", "password": "pw"}, follow_redirects=True)


def _post(client, url, data=None, **kwargs):
    with client.session_transaction() as sess:
        token = sess.setdefault("csrf_token", "test-csrf-token")
    payload = dict(data or {})
    payload["csrf_token"] = token
    return client.post(url, data=payload, **kwargs)


def _add_page(app, slug="about-us", is_published=True, **overrides) -> int:
    with session_scope(app) as s:
        page = Page(
            slug=slug,
            title=overrides.get("title", "About us"),
            content_html=overrides.get("content_html", "<p>We help <strong>students</strong>.</p>"),
            is_published=is_published,
        )
        s.add(page)
        s.flush()
        return page.id


def test_published_page_is_served_by_slug(app, client):
    _add_page(app)
    r = client.get("/about-us")
    assert r.status_code == 200
    assert b"<strong>students</strong>" in r.data


def test_slug_lookup_is_case_insensitive(app, client):
    _add_page(app)
    assert client.get("/About-Us").status_code == 200


def test_unpublished_page_is_404(app, client):
    _add_page(app, slug="draft", is_published=False)
    assert client.get("/draft").status_code == 404


def test_pages_admin_requires_auth(client):
    r = client.get("/admin/pages")
    assert r.status_code in (302, 403)


def test_create_page(app, client):
    _login(client)
    r = _post(
        client,
        "/admin/pages/new",
        {"slug": "FAQ", "title": "Frequently asked", "content_html": "<h2>Q</h2>", "is_published": "1"},
        follow_redirects=False,
    )
    assert r.status_code == 302

    with session_scope(app) as s:
        page = s.query(Page).one()
        assert page.slug == "faq"
        assert page.is_published is True
        assert s.query(AuditEvent).filter(AuditEvent.action == "page.create").count() == 1

    assert client.get("/faq").status_code == 200


def test_duplicate_slug_rejected(app, client):
    _add_page(app, slug="terms")
    _login(client)
    r = _post(client, "/admin/pages/new", {"slug": "terms", "title": "Again", "content_html": "x"})
    assert r.status_code == 400
    assert b"already in use" in r.data
    with session_scope(app) as s:
        assert s.query(Page).count() == 1


@pytest.mark.parametrize("slug", ["admin", "scholarships", "bad slug", "Under_score", ""])
def test_reserved_or_malformed_slug_rejected(app, client, slug):
    _login(client)
    r = _post(client, "/admin/pages/new", {"slug": slug, "title": "T", "content_html": "x"})
    assert r.status_code == 400
    with session_scope(app) as s:
        assert s.query(Page).count() == 0


def test_edit_page_keeps_own_slug(app, client):
    pid = _add_page(app, slug="help")
    _login(client)
    r = _post(
        client,
        f"/admin/pages/{pid}/edit",
        {"slug": "help", "title": "Help centre", "content_html": "<p>new</p>"},
        follow_redirects=False,
    )
    assert r.status_code == 302
    with session_scope(app) as s:
        page = s.get(Page, pid)
        assert page.title == "Help centre"
        # unchecked box unpublishes
        assert page.is_published is False
    assert client.get("/help").status_code == 404


def test_edit_page_cannot_take_another_slug(app, client):
    _add_page(app, slug="one")
    pid = _add_page(app, slug="two")
    _login(client)
    r = _post(client, f"/admin/pages/{pid}/edit", {"slug": "one", "title": "Two", "content_html": "x"})
    assert r.status_code == 400
    with session_scope(app) as s:
        assert s.get(Page, pid).slug == "two"


def test_delete_page(app, client):
    pid = _add_page(app, slug="gone")
    _login(client)
    assert client.get(f"/admin/pages/{pid}/delete").status_code == 200
    r = _post(client, f"/admin/pages/{pid}/delete", follow_redirects=False)
    assert r.status_code == 302
    with session_scope(app) as s:
        assert s.get(Page, pid) is None
    assert client.get("/gone").status_code == 404
