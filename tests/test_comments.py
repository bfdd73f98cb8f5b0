"""
Tests for the comment thread endpoints.
"""
from datetime import timedelta

from app.core.timeutils import utcnow
from app.modules.posts.comments.models.comment import Comment


def comments_url(post_id: str) -> str:
    return f"/api/v1/posts/{post_id}/comments"


class TestAddComment:
    """Creating comments and replies."""

    def test_comment_and_reply_tree(self, client, auth_headers, other_headers, other_user, create_post):
        post = create_post(auth_headers)
        url = comments_url(post["id"])

        first = client.post(url, json={"content": "  First!  "}, headers=other_headers)
        assert first.status_code == 201
        assert first.json()["content"] == "First!"
        assert first.json()["author_nickname"] == other_user.nickname
        second = client.post(url, json={"content": "Second"}, headers=auth_headers).json()
        reply = client.post(
            url, json={"content": "Reply", "parent_id": first.json()["id"]}, headers=auth_headers
        ).json()

        tree = client.get(url).json()
        assert [c["id"] for c in tree] == [first.json()["id"], second["id"]]
        assert [r["id"] for r in tree[0]["replies"]] == [reply["id"]]
        assert tree[1]["replies"] == []

    def test_reply_to_reply_rejected(self, client, auth_headers, create_post):
        post = create_post(auth_headers)
        url = comments_url(post["id"])
        top = client.post(url, json={"content": "top"}, headers=auth_headers).json()
        reply = client.post(url, json={"content": "reply", "parent_id": top["id"]}, headers=auth_headers).json()

        response = client.post(url, json={"content": "deeper", "parent_id": reply["id"]}, headers=auth_headers)
        assert response.status_code == 400

    def test_parent_from_other_post_rejected(self, client, auth_headers, create_post):
        post_a = create_post(auth_headers, title="A")
        post_b = create_post(auth_headers, title="B")
        foreign = client.post(comments_url(post_a["id"]), json={"content": "on A"}, headers=auth_headers).json()

        response = client.post(
            comments_url(post_b["id"]), json={"content": "x", "parent_id": foreign["id"]}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_blank_content_rejected(self, client, auth_headers, create_post):
        post = create_post(auth_headers)
        response = client.post(comments_url(post["id"]), json={"content": "   "}, headers=auth_headers)
        assert response.status_code == 400

    def test_hidden_post_not_found(self, client, auth_headers, other_headers, create_post):
        post = create_post(auth_headers, status="draft")
        response = client.post(comments_url(post["id"]), json={"content": "hi"}, headers=other_headers)
        assert response.status_code == 404
        assert client.get(comments_url(post["id"])).status_code == 404

    def test_suspended_user_cannot_comment(self, client, auth_headers, make_user, headers, create_post):
        post = create_post(auth_headers)
        suspended = make_user("dave", suspended_until=utcnow() + timedelta(days=1))
        response = client.post(comments_url(post["id"]), json={"content": "hi"}, headers=headers(suspended))
        assert response.status_code == 403
        assert response.json()["detail"].startswith("activity suspended until ")

    def test_anonymous_cannot_comment(self, client, auth_headers, create_post):
        post = create_post(auth_headers)
        assert client.post(comments_url(post["id"]), json={"content": "hi"}).status_code == 401


class TestEditDeleteComment:
    """Editing and deleting comments."""

    def test_author_edits_and_is_edited_flag(self, client, auth_headers, create_post):
        post = create_post(auth_headers)
        url = comments_url(post["id"])
        comment = client.post(url, json={"content": "typo"}, headers=auth_headers).json()
        assert comment["is_edited"] is False

        response = client.put(f"{url}/{comment['id']}", json={"content": "fixed"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["content"] == "fixed"
        assert response.json()["is_edited"] is True

    def test_only_author_edits(self, client, auth_headers, other_headers, admin_headers, create_post):
        post = create_post(auth_headers)
        url = comments_url(post["id"])
        comment = client.post(url, json={"content": "mine"}, headers=auth_headers).json()
        assert client.put(f"{url}/{comment['id']}", json={"content": "x"}, headers=other_headers).status_code == 403
        assert client.put(f"{url}/{comment['id']}", json={"content": "x"}, headers=admin_headers).status_code == 403

    def test_delete_top_level_removes_replies(self, client, db, auth_headers, other_headers, create_post):
        post = create_post(auth_headers)
        url = comments_url(post["id"])
        top = client.post(url, json={"content": "top"}, headers=other_headers).json()
        client.post(url, json={"content": "reply", "parent_id": top["id"]}, headers=auth_headers)

        response = client.delete(f"{url}/{top['id']}", headers=other_headers)
        assert response.status_code == 204
        assert db.query(Comment).filter(Comment.post_id == post["id"]).count() == 0
        assert client.get(url).json() == []

    def test_admin_deletes_any_comment(self, client, auth_headers, admin_headers, create_post):
        post = create_post(auth_headers)
        url = comments_url(post["id"])
        comment = client.post(url, json={"content": "spam"}, headers=auth_headers).json()
        assert client.delete(f"{url}/{comment['id']}", headers=admin_headers).status_code == 204

    def test_stranger_cannot_delete(self, client, auth_headers, other_headers, create_post):
        post = create_post(auth_headers)
        url = comments_url(post["id"])
        comment = client.post(url, json={"content": "mine"}, headers=auth_headers).json()
        assert client.delete(f"{url}/{comment['id']}", headers=other_headers).status_code == 403

    def test_comment_must_belong_to_post(self, client, auth_headers, create_post):
        post_a = create_post(auth_headers, title="A")
        post_b = create_post(auth_headers, title="B")
        comment = client.post(comments_url(post_a["id"]), json={"content": "a"}, headers=auth_headers).json()
        response = client.delete(f"{comments_url(post_b['id'])}/{comment['id']}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Comment does not belong to the specified post"

        missing = client.delete(f"{comments_url(post_a['id'])}/missing", headers=auth_headers)
        assert missing.status_code == 404
        assert missing.json()["detail"] == "Comment not found"


class TestMyComments:
    """My-page comment list."""

    def test_lists_with_post_info(self, client, auth_headers, create_post):
        post = create_post(auth_headers, title="Commented post")
        client.post(comments_url(post["id"]), json={"content": "older"}, headers=auth_headers)
        client.post(comments_url(post["id"]), json={"content": "newer"}, headers=auth_headers)

        data = client.get("/api/v1/users/me/comments", headers=auth_headers).json()
        assert [c["content"] for c in data] == ["newer", "older"]
        assert data[0]["post_title"] == "Commented post"
        assert data[0]["post_slug"] == post["slug"]
