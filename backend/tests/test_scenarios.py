"""
End-to-end flows across HTTP and the WebSocket gateway.

- Reports hide a post at the threshold
- Admin restore lets the same users report again
- Poll updates respect each viewer's privacy
"""

import pytest

from rest_api.models import ForumPost
from shared.security.auth import sign_user_token


@pytest.fixture
def authored_post(db_session, student):
    post = ForumPost(author_id=student.id, content="Selling exam answers", category="general")
    db_session.add(post)
    db_session.commit()
    db_session.refresh(post)
    return post


def _report(client, auth_headers, post_id, user, reason):
    return client.post(
        f"/api/forum/posts/{post_id}/report",
        json={"reason": reason},
        headers=auth_headers(user),
    )


class TestReportAndRestore:

    def test_three_reports_hide_then_restore_allows_reporting_again(
        self, client, authored_post, make_users, admin, student, auth_headers
    ):
        b, c, d = make_users(3, "reporter")
        post_id = authored_post.id

        assert _report(client, auth_headers, post_id, b, "spam").json()["wasAutoHidden"] is False
        assert _report(client, auth_headers, post_id, c, "harassment").json()["wasAutoHidden"] is False
        third = _report(client, auth_headers, post_id, d, "spam").json()

        assert third["currentReportCount"] == 3
        assert third["wasAutoHidden"] is True
        assert client.get(f"/api/forum/posts/{post_id}", headers=auth_headers(student)).status_code == 404
        listed = client.get("/api/forum/posts", headers=auth_headers(student)).json()
        assert post_id not in [p["id"] for p in listed]

        restored = client.post(f"/api/admin/forum/posts/{post_id}/restore", headers=auth_headers(admin))
        assert restored.status_code == 200

        post = client.get(f"/api/forum/posts/{post_id}", headers=auth_headers(student)).json()
        assert post["reportCount"] == 0
        assert post["isHiddenByReports"] is False

        again = _report(client, auth_headers, post_id, b, "spam")
        assert again.status_code == 201
        assert again.json()["currentReportCount"] == 1


class TestPollPrivacy:

    @pytest.fixture
    def poll(self, client, counselor, auth_headers):
        response = client.post(
            "/api/forum/posts",
            json={
                "content": "Quick poll",
                "category": "general",
                "pollQuestion": "Did you get your visa?",
                "pollOptions": [{"id": "1", "text": "Yes"}, {"id": "2", "text": "No"}],
            },
            headers=auth_headers(counselor),
        )
        assert response.status_code == 201
        assert response.json()["pollOptions"] == [{"id": "1", "text": "Yes"}, {"id": "2", "text": "No"}]
        return response.json()["id"]

    def test_voter_sees_counts_non_voter_does_not(self, client, poll, make_users, auth_headers):
        x, y = make_users(2, "viewer")

        client.post(f"/api/forum/posts/{poll}/vote", json={"optionId": "1"}, headers=auth_headers(x))

        y_view = client.get(f"/api/forum/posts/{poll}/poll", headers=auth_headers(y)).json()
        x_view = client.get(f"/api/forum/posts/{poll}/poll", headers=auth_headers(x)).json()

        assert y_view["pollOptions"] == [{"id": "1", "text": "Yes"}, {"id": "2", "text": "No"}]
        assert y_view["showResults"] is False
        assert x_view["totalVotes"] == 1
        assert x_view["pollOptions"] == [
            {"id": "1", "text": "Yes", "votes": 1, "percentage": 100},
            {"id": "2", "text": "No", "votes": 0, "percentage": 0},
        ]

    def test_broadcast_is_shaped_per_connection(self, client, poll, make_users, auth_headers):
        x, y = make_users(2, "viewer")

        with client.websocket_connect("/ws") as x_ws, client.websocket_connect("/ws") as y_ws:
            for ws, user in ((x_ws, x), (y_ws, y)):
                ws.receive_json()
                ws.send_json({"type": "authenticate", "token": sign_user_token(user.id, user.role)})
                ws.receive_json()

            client.post(f"/api/forum/posts/{poll}/vote", json={"optionId": "1"}, headers=auth_headers(x))
            x_event = x_ws.receive_json()
            y_event = y_ws.receive_json()

        assert x_event["type"] == y_event["type"] == "poll_vote_update"
        assert x_event["data"]["votingUserId"] == y_event["data"]["votingUserId"] == x.id
        assert x_event["data"]["showResults"] is True
        assert x_event["data"]["userVotes"] == ["1"]
        assert x_event["data"]["pollOptions"][0]["votes"] == 1
        assert y_event["data"]["showResults"] is False
        assert y_event["data"]["userVotes"] == []
        assert y_event["data"]["pollOptions"] == [{"id": "1", "text": "Yes"}, {"id": "2", "text": "No"}]
