"""
Tests for the admin control plane and site settings.
"""
from datetime import datetime, timedelta

import pytest

from app.core.errors import PermissionDeniedError
from app.core.timeutils import utcnow
from app.modules.categories.schemas.category import CategoryCreate, CategoryUpdate
from app.modules.categories.services.category import create_category, delete_category, update_category
from app.modules.moderation.services.site_settings import is_signup_enabled, set_signup_enabled

ADMIN = "/api/v1/admin"


class TestAdminAccess:
    """Only admins reach the control plane."""

    def test_non_admin_forbidden(self, client, auth_headers):
        assert client.get(f"{ADMIN}/users", headers=auth_headers).status_code == 403

    def test_anonymous_unauthorized(self, client):
        assert client.get(f"{ADMIN}/users").status_code == 401

    def test_admin_lists_users(self, client, admin_headers, test_user):
        response = client.get(f"{ADMIN}/users", headers=admin_headers)
        assert response.status_code == 200
        assert test_user.id in [u["id"] for u in response.json()]


class TestSuspension:
    """Suspending and reinstating accounts."""

    def test_suspend_blocks_writes_until_lifted(self, client, mailer, admin_headers, test_user, auth_headers):
        response = client.post(f"{ADMIN}/users/{test_user.id}/suspend", json={"days": 7}, headers=admin_headers)
        assert response.status_code == 200
        until = datetime.fromisoformat(response.json()["suspended_until"])
        assert timedelta(days=6, hours=23) < until - utcnow() <= timedelta(days=7)
        assert mailer.sent[-1]["to"] == test_user.email
        assert "suspension" in mailer.sent[-1]["subject"].lower()

        blocked = client.post("/api/v1/posts", json={"title": "T", "content": "c"}, headers=auth_headers)
        assert blocked.status_code == 403
        assert blocked.json()["detail"] == f"activity suspended until {until.strftime('%Y-%m-%d')}"
        me = client.get("/api/v1/users/me", headers=auth_headers).json()
        assert me["is_suspended"] is True

        lifted = client.post(f"{ADMIN}/users/{test_user.id}/unsuspend", headers=admin_headers)
        assert lifted.status_code == 200
        assert lifted.json()["suspended_until"] is None
        assert mailer.sent[-1]["subject"].endswith("Account suspension lifted")

        allowed = client.post("/api/v1/posts", json={"title": "T", "content": "c"}, headers=auth_headers)
        assert allowed.status_code == 201

    def test_suspend_until_timestamp(self, client, admin_headers, test_user):
        until = (utcnow() + timedelta(days=2)).replace(microsecond=0)
        response = client.post(
            f"{ADMIN}/users/{test_user.id}/suspend", json={"until": until.isoformat()}, headers=admin_headers
        )
        assert response.status_code == 200
        assert datetime.fromisoformat(response.json()["suspended_until"]) == until

    def test_past_until_rejected(self, client, admin_headers, test_user):
        response = client.post(
            f"{ADMIN}/users/{test_user.id}/suspend", json={"until": "2000-01-01T00:00:00"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_admin_cannot_suspend_self(self, client, admin_headers, admin_user):
        response = client.post(f"{ADMIN}/users/{admin_user.id}/suspend", json={"days": 1}, headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_user(self, client, admin_headers):
        response = client.post(f"{ADMIN}/users/missing/suspend", json={"days": 1}, headers=admin_headers)
        assert response.status_code == 404


class TestForcedActions:
    """Admin actions on other people's content."""

    def test_delete_user_removes_their_posts(self, client, admin_headers, auth_headers, test_user, create_post):
        create_post(auth_headers)
        create_post(auth_headers, title="Second")

        response = client.delete(f"{ADMIN}/users/{test_user.id}", headers=admin_headers)
        assert response.status_code == 204
        assert client.get("/api/v1/posts").json()["total"] == 0
        assert client.get("/api/v1/users/me", headers=auth_headers).status_code == 401

    def test_admin_cannot_delete_self(self, client, admin_headers, admin_user):
        assert client.delete(f"{ADMIN}/users/{admin_user.id}", headers=admin_headers).status_code == 400

    def test_force_status_and_feature(self, client, admin_headers, auth_headers, create_post):
        post = create_post(auth_headers)

        hidden = client.patch(f"{ADMIN}/posts/{post['id']}/status", json={"status": "private"}, headers=admin_headers)
        assert hidden.status_code == 200
        assert hidden.json()["status"] == "private"
        assert client.get(f"/api/v1/posts/{post['slug']}").status_code == 404

        client.patch(f"{ADMIN}/posts/{post['id']}/status", json={"status": "published"}, headers=admin_headers)
        featured = client.patch(
            f"{ADMIN}/posts/{post['id']}/featured", json={"is_featured": True}, headers=admin_headers
        )
        assert featured.json()["is_featured"] is True
        assert client.get("/api/v1/posts/hero").json()["featured"]["id"] == post["id"]

    def test_all_posts_includes_drafts(self, client, admin_headers, auth_headers, create_post):
        create_post(auth_headers, title="Draft", status="draft")
        create_post(auth_headers, title="Public")
        titles = [p["title"] for p in client.get(f"{ADMIN}/posts", headers=admin_headers).json()]
        assert sorted(titles) == ["Draft", "Public"]

    def test_force_delete_post(self, client, admin_headers, auth_headers, create_post):
        post = create_post(auth_headers)
        assert client.delete(f"{ADMIN}/posts/{post['id']}", headers=admin_headers).status_code == 204
        assert client.get(f"/api/v1/posts/{post['slug']}").status_code == 404


class TestCategoryManagement:
    """Category create, rename and delete."""

    def test_lifecycle(self, client, admin_headers, auth_headers, create_post):
        created = client.post(
            f"{ADMIN}/categories", json={"name": "Web Dev", "slug": "Web Dev"}, headers=admin_headers
        )
        assert created.status_code == 201
        category = created.json()
        assert category["slug"] == "web-dev"
        assert [c["slug"] for c in client.get("/api/v1/categories").json()] == ["web-dev"]

        renamed = client.put(
            f"{ADMIN}/categories/{category['id']}", json={"name": "Web"}, headers=admin_headers
        )
        assert renamed.json()["name"] == "Web"
        assert renamed.json()["slug"] == "web-dev"

        post = create_post(auth_headers, category_id=category["id"])
        assert client.delete(f"{ADMIN}/categories/{category['id']}", headers=admin_headers).status_code == 204
        detail = client.get(f"/api/v1/posts/{post['slug']}").json()
        assert detail["category_id"] is None
        assert client.get("/api/v1/categories").json() == []

    def test_duplicate_slug_conflicts(self, client, admin_headers, category):
        response = client.post(
            f"{ADMIN}/categories", json={"name": "Python again", "slug": "python"}, headers=admin_headers
        )
        assert response.status_code == 409

    def test_non_admin_cannot_create(self, client, auth_headers):
        response = client.post(f"{ADMIN}/categories", json={"name": "X", "slug": "x"}, headers=auth_headers)
        assert response.status_code == 403


class TestSiteSettings:
    """Global sign-up switch."""

    def test_signup_toggle(self, client, admin_headers):
        assert client.get("/api/v1/site-settings").json() == {"signup_enabled": True}

        response = client.put(f"{ADMIN}/settings", json={"signup_enabled": False}, headers=admin_headers)
        assert response.status_code == 200
        assert client.get("/api/v1/site-settings").json() == {"signup_enabled": False}

        signup = client.post(
            "/api/v1/auth/signup",
            json={
                "email": "new@example.com",
                "username": "newbie",
                "nickname": "Newbie",
                "password": "secret123",
                "password_confirm": "secret123",
            },
        )
        assert signup.status_code == 403
        assert signup.json()["detail"] == "Sign-up is currently disabled"


class TestServiceRoleChecks:
    """Category and settings services check the acting user's role themselves."""

    def test_category_services_reject_regular_users(self, db, test_user, category):
        with pytest.raises(PermissionDeniedError):
            create_category(db, test_user, CategoryCreate(name="Go", slug="go"))
        with pytest.raises(PermissionDeniedError):
            update_category(db, test_user, category.id, CategoryUpdate(name="Renamed"))
        with pytest.raises(PermissionDeniedError):
            delete_category(db, test_user, category.id)

    def test_signup_switch_rejects_regular_users(self, db, test_user):
        with pytest.raises(PermissionDeniedError):
            set_signup_enabled(db, test_user, False)
        assert is_signup_enabled(db) is True

    def test_admin_passes_service_checks(self, db, admin_user):
        created = create_category(db, admin_user, CategoryCreate(name="Go", slug="go"))
        assert created.slug == "go"
        assert set_signup_enabled(db, admin_user, False).signup_enabled is False
