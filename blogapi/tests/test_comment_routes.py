"""
Tests for comment routes.
"""

import pytest

from blogapi.services.engagement_service import COMMENT_CONFLICT_MESSAGE

API = "/api/v1/comments"


@pytest.fixture
def author(make_user):
    return make_user(username="article_author", role="admin")


@pytest.fixture
def article_id(make_article, author):
    return make_article(created_by=author)


@pytest.fixture
def commented(client, article_id, make_user, auth_headers):
    """An article with one comment; returns (commenter, comment id)."""
    commenter = make_user(username="commenter")
    response = client.post(
        API,
        json={"article_id": article_id, "comment": "Great read, thanks!"},
        headers=auth_headers(commenter),
    )
    assert response.status_code == 201
    return commenter, response.json()["data"]["id"]


class TestCreateComment:
    """Tests for POST /comments endpoint."""

    def test_requires_auth(self, client, article_id):
        response = client.post(API, json={"article_id": article_id, "comment": "Hello"})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"

    def test_create_comment(self, client, article_id, make_user, auth_headers):
        user = make_user(username="reader_one")
        response = client.post(
            API,
            json={"article_id": article_id, "comment": "  Very useful  "},
            headers=auth_headers(user),
        )
        assert response.status_code == 201
        comment = response.json()["data"]
        assert comment["comment"] == "Very useful"
        assert comment["username"] == "reader_one"
        assert comment["article_id"] == article_id
        assert comment["likes_count"] == 0

    def test_max_length_accepted(self, client, article_id, make_user, auth_headers):
        """600 characters is within the limit."""
        response = client.post(
            API,
            json={"article_id": article_id, "comment": "a" * 600},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 201

    def test_over_max_length_rejected(self, client, article_id, make_user, auth_headers):
        response = client.post(
            API,
            json={"article_id": article_id, "comment": "a" * 601},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 400

    def test_links_rejected(self, client, article_id, make_user, auth_headers):
        """Comments containing "http" are rejected."""
        response = client.post(
            API,
            json={"article_id": article_id, "comment": "see https://spam.example"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 400

    def test_empty_rejected(self, client, article_id, make_user, auth_headers):
        response = client.post(
            API,
            json={"article_id": article_id, "comment": "   "},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 400

    def test_author_cannot_comment(self, client, article_id, author, auth_headers):
        """The article's author cannot comment on it."""
        response = client.post(
            API,
            json={"article_id": article_id, "comment": "My own article"},
            headers=auth_headers(author),
        )
        assert response.status_code == 409
        assert response.json()["message"] == COMMENT_CONFLICT_MESSAGE

    def test_one_comment_per_user(self, client, article_id, commented, auth_headers):
        """A second comment by the same user is a conflict."""
        commenter, _ = commented
        response = client.post(
            API,
            json={"article_id": article_id, "comment": "Another one"},
            headers=auth_headers(commenter),
        )
        assert response.status_code == 409
        assert len(client.get(f"{API}/by-article/{article_id}").json()["data"]) == 1

    def test_unknown_article(self, client, make_user, auth_headers):
        response = client.post(
            API,
            json={"article_id": "65f1c0ffee0000000000abcd", "comment": "Hello"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 409

    def test_comments_count_on_article(self, client, article_id, commented):
        article = client.get(f"/api/v1/articles/by-id/{article_id}").json()["data"]
        assert article["comments_count"] == 1


class TestListComments:
    """Tests for GET /comments/by-article/{id} endpoint."""

    def test_newest_first(self, client, article_id, make_user, auth_headers):
        for name in ("first_user", "second_user", "third_user"):
            client.post(
                API,
                json={"article_id": article_id, "comment": f"Comment by {name}"},
                headers=auth_headers(make_user(username=name)),
            )
        comments = client.get(f"{API}/by-article/{article_id}").json()["data"]
        assert [c["username"] for c in comments] == ["third_user", "second_user", "first_user"]

    def test_reports_hidden_from_public(self, client, article_id, commented):
        comments = client.get(f"{API}/by-article/{article_id}").json()["data"]
        assert comments[0]["reports_count"] is None

    def test_reports_visible_to_admin(self, client, article_id, commented, admin_key_headers):
        comments = client.get(f"{API}/by-article/{article_id}", headers=admin_key_headers).json()["data"]
        assert comments[0]["reports_count"] == 0

    def test_unknown_article(self, client):
        assert client.get(f"{API}/by-article/65f1c0ffee0000000000abcd").status_code == 404


class TestEditComment:
    """Tests for PATCH /comments/{id} endpoint."""

    def test_owner_edits(self, client, commented, auth_headers):
        commenter, comment_id = commented
        response = client.patch(f"{API}/{comment_id}", json={"comment": "Edited"}, headers=auth_headers(commenter))
        assert response.status_code == 200
        assert response.json()["data"]["comment"] == "Edited"

    def test_other_user_cannot_edit(self, client, commented, make_user, auth_headers):
        _, comment_id = commented
        response = client.patch(f"{API}/{comment_id}", json={"comment": "Hijack"}, headers=auth_headers(make_user()))
        assert response.status_code == 403

    def test_edit_validates_text(self, client, commented, auth_headers):
        commenter, comment_id = commented
        response = client.patch(
            f"{API}/{comment_id}",
            json={"comment": "visit http://example.com"},
            headers=auth_headers(commenter),
        )
        assert response.status_code == 400


class TestDeleteComment:
    """Tests for DELETE /comments/{id} endpoint."""

    def test_owner_deletes(self, client, article_id, commented, auth_headers):
        commenter, comment_id = commented
        response = client.delete(f"{API}/{comment_id}", headers=auth_headers(commenter))
        assert response.status_code == 200
        assert client.get(f"{API}/by-article/{article_id}").json()["data"] == []

    def test_non_owner_gets_not_found(self, client, article_id, commented, make_user, auth_headers):
        """A non-owner's delete is indistinguishable from a missing comment."""
        _, comment_id = commented
        response = client.delete(f"{API}/{comment_id}", headers=auth_headers(make_user()))
        assert response.status_code == 404
        assert len(client.get(f"{API}/by-article/{article_id}").json()["data"]) == 1

    def test_admin_deletes_any(self, client, article_id, commented, author, auth_headers):
        _, comment_id = commented
        response = client.delete(f"{API}/{comment_id}", headers=auth_headers(author))
        assert response.status_code == 200
        assert client.get(f"{API}/by-article/{article_id}").json()["data"] == []

    def test_user_can_comment_again_after_delete(self, client, article_id, commented, auth_headers):
        commenter, comment_id = commented
        client.delete(f"{API}/{comment_id}", headers=auth_headers(commenter))
        response = client.post(
            API,
            json={"article_id": article_id, "comment": "Second thoughts"},
            headers=auth_headers(commenter),
        )
        assert response.status_code == 201


class TestCommentLikes:
    """Tests for POST /comments/{id}/likes endpoint."""

    def test_like_toggle(self, client, commented, make_user, auth_headers):
        _, comment_id = commented
        headers = auth_headers(make_user())
        first = client.post(f"{API}/{comment_id}/likes", headers=headers).json()["data"]
        assert first == {"liked": True, "like_count": 1}
        second = client.post(f"{API}/{comment_id}/likes", headers=headers).json()["data"]
        assert second == {"liked": False, "like_count": 0}

    def test_is_liked_for_viewer(self, client, article_id, commented, make_user, auth_headers):
        _, comment_id = commented
        headers = auth_headers(make_user())
        client.post(f"{API}/{comment_id}/likes", headers=headers)
        comments = client.get(f"{API}/by-article/{article_id}", headers=headers).json()["data"]
        assert comments[0]["is_liked"] is True
        assert comments[0]["likes_count"] == 1

    def test_unknown_comment(self, client, make_user, auth_headers):
        response = client.post(f"{API}/65f1c0ffee0000000000abcd/likes", headers=auth_headers(make_user()))
        assert response.status_code == 404


class TestReportComment:
    """Tests for POST /comments/{id}/reports endpoint."""

    def test_report_notifies_author(self, client, commented, make_user, auth_headers, mailer):
        """The comment's author gets a notice after the report."""
        commenter, comment_id = commented
        response = client.post(
            f"{API}/{comment_id}/reports",
            json={"reason": "spam"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 201
        notices = mailer.to(commenter.email)
        assert len(notices) == 1
        assert notices[0].subject.startswith("Your comment has been reported")
        assert "Great read, thanks!" in notices[0].body

    def test_duplicate_report(self, client, commented, make_user, auth_headers):
        _, comment_id = commented
        headers = auth_headers(make_user())
        client.post(f"{API}/{comment_id}/reports", json={"reason": "spam"}, headers=headers)
        response = client.post(f"{API}/{comment_id}/reports", json={"reason": "racist"}, headers=headers)
        assert response.status_code == 409
        assert response.json()["message"] == "You have already reported this comment!"

    def test_invalid_reason(self, client, commented, make_user, auth_headers):
        _, comment_id = commented
        response = client.post(
            f"{API}/{comment_id}/reports",
            json={"reason": "boring"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 400

    def test_report_succeeds_when_mail_fails(
        self, client, commented, make_user, auth_headers, article_id, admin_key_headers, failing_mailer
    ):
        """A failing mail transport does not affect the report."""
        _, comment_id = commented
        response = client.post(
            f"{API}/{comment_id}/reports",
            json={"reason": "harassment"},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 201
        comments = client.get(f"{API}/by-article/{article_id}", headers=admin_key_headers).json()["data"]
        assert comments[0]["reports_count"] == 1
