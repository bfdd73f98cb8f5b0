"""
Tests for the bookmark registry.
"""
import uuid

from app.modules.posts.bookmarks.models.bookmark import Bookmark
from app.modules.posts.bookmarks.services import bookmark as bookmark_service
from app.modules.posts.bookmarks.services.bookmark import is_bookmarked, toggle_bookmark


def bookmark_url(post_id: str) -> str:
    return f"/api/v1/posts/{post_id}/bookmark"


class TestBookmarks:
    """Toggling and listing bookmarks."""

    def test_toggle_on_and_off(self, client, auth_headers, other_headers, create_post):
        post = create_post(auth_headers)

        on = client.post(bookmark_url(post["id"]), headers=other_headers)
        assert on.status_code == 200
        assert on.json() == {"post_id": post["id"], "bookmarked": True}
        detail = client.get(f"/api/v1/posts/{post['slug']}", headers=other_headers).json()
        assert detail["is_bookmarked"] is True

        off = client.post(bookmark_url(post["id"]), headers=other_headers)
        assert off.json()["bookmarked"] is False
        detail = client.get(f"/api/v1/posts/{post['slug']}", headers=other_headers).json()
        assert detail["is_bookmarked"] is False

    def test_missing_post(self, client, auth_headers):
        assert client.post(bookmark_url("missing"), headers=auth_headers).status_code == 404

    def test_requires_authentication(self, client, auth_headers, create_post):
        post = create_post(auth_headers)
        assert client.post(bookmark_url(post["id"])).status_code == 401

    def test_list_newest_first_and_drops_deleted_posts(self, client, auth_headers, other_headers, create_post):
        first = create_post(auth_headers, title="First")
        second = create_post(auth_headers, title="Second")
        gone = create_post(auth_headers, title="Gone")
        for post in (first, second, gone):
            client.post(bookmark_url(post["id"]), headers=other_headers)

        client.delete(f"/api/v1/posts/{gone['id']}", headers=auth_headers)

        data = client.get("/api/v1/users/me/bookmarks", headers=other_headers).json()
        assert [p["title"] for p in data] == ["Second", "First"]

    def test_service_toggle_removes_existing_pair(self, db, test_user, other_user, create_post, auth_headers):
        post = create_post(auth_headers)
        db.add(Bookmark(id=str(uuid.uuid4()), user_id=other_user.id, post_id=post["id"]))
        db.commit()

        assert is_bookmarked(db, other_user.id, post["id"]) is True
        assert toggle_bookmark(db, other_user, post["id"]) is False
        assert is_bookmarked(db, other_user.id, post["id"]) is False

    def test_concurrent_duplicate_counts_as_bookmarked(self, db, other_user, create_post, auth_headers, monkeypatch):
        post = create_post(auth_headers)
        db.add(Bookmark(id=str(uuid.uuid4()), user_id=other_user.id, post_id=post["id"]))
        db.commit()
        # The pair lands between the lookup and the insert
        monkeypatch.setattr(bookmark_service, "get_bookmark", lambda *args: None)

        assert toggle_bookmark(db, other_user, post["id"]) is True
        assert db.query(Bookmark).filter(Bookmark.post_id == post["id"]).count() == 1


class TestBookmarkVisibility:
    """Bookmarks never reveal posts the user cannot see."""

    def test_hidden_post_leaves_the_list(self, client, auth_headers, other_headers, create_post):
        post = create_post(auth_headers, title="Secret plans")
        client.post(bookmark_url(post["id"]), headers=other_headers)
        client.patch(f"/api/v1/posts/{post['id']}/status", json={"status": "private"}, headers=auth_headers)

        assert client.get("/api/v1/users/me/bookmarks", headers=other_headers).json() == []

    def test_owner_keeps_own_private_bookmark(self, client, auth_headers, create_post):
        post = create_post(auth_headers, status="private")
        assert client.post(bookmark_url(post["id"]), headers=auth_headers).json()["bookmarked"] is True
        data = client.get("/api/v1/users/me/bookmarks", headers=auth_headers).json()
        assert [p["id"] for p in data] == [post["id"]]

    def test_cannot_bookmark_foreign_draft(self, client, auth_headers, other_headers, create_post):
        post = create_post(auth_headers, status="draft")
        response = client.post(bookmark_url(post["id"]), headers=other_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Post not found"
