import json
from urllib.parse import parse_qs

import httpx
import pytest

from slackcli.utils import AuthError, RateLimitError, SlackApiError, SlackClient


def make_client(handler) -> SlackClient:
    return SlackClient(
        "xoxc-test",
        cookie="xoxd-cookie",
        base_url="https://slack.test/api",
        transport=httpx.MockTransport(handler),
    )


def form(request: httpx.Request) -> dict:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


class TestCallApi:
    def test_ok_payload_and_request_shape(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["cookie"] = request.headers.get("cookie")
            seen["form"] = form(request)
            return httpx.Response(200, json={"ok": True, "ts": "1.2"})

        with make_client(handler) as client:
            data = client.call_api(
                "chat.postMessage",
                {"channel": "C1", "text": "hi", "thread_ts": None, "unfurl": False, "blocks": [{"a": 1}]},
            )

        assert data["ts"] == "1.2"
        assert seen["url"] == "https://slack.test/api/chat.postMessage"
        assert seen["auth"] == "Bearer xoxc-test"
        assert "d=xoxd-cookie" in seen["cookie"]
        assert seen["form"] == {"channel": "C1", "text": "hi", "unfurl": "false", "blocks": '[{"a": 1}]'}

    def test_slack_error_code(self) -> None:
        client = make_client(lambda r: httpx.Response(200, json={"ok": False, "error": "channel_not_found"}))

        with pytest.raises(SlackApiError) as excinfo:
            client.call_api("conversations.info", {"channel": "C404"})

        assert excinfo.value.error == "channel_not_found"
        assert excinfo.value.method == "conversations.info"
        assert not isinstance(excinfo.value, AuthError)

    def test_auth_error_code(self) -> None:
        client = make_client(lambda r: httpx.Response(200, json={"ok": False, "error": "invalid_auth"}))

        with pytest.raises(AuthError) as excinfo:
            client.auth_test()

        assert excinfo.value.hint

    def test_rate_limit(self) -> None:
        client = make_client(lambda r: httpx.Response(429, headers={"Retry-After": "30"}))

        with pytest.raises(RateLimitError) as excinfo:
            client.call_api("users.counts")

        assert excinfo.value.retry_after == 30

    def test_http_error_status(self) -> None:
        client = make_client(lambda r: httpx.Response(500, text="oops"))

        with pytest.raises(SlackApiError, match="HTTP 500"):
            client.call_api("users.counts")

    def test_double_encoded_payload(self) -> None:
        body = json.dumps(json.dumps({"ok": True, "channel": {"id": "C1"}}))
        client = make_client(lambda r: httpx.Response(200, text=body))

        assert client.get_conversation_info("C1") == {"id": "C1"}


class TestFetch:
    def test_sign_in_redirect_is_auth_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "files.slack.test":
                return httpx.Response(302, headers={"location": "https://acme.slack.test/?redir=%2FF1"})
            return httpx.Response(200, text="<html>sign in</html>", headers={"content-type": "text/html"})

        client = make_client(handler)

        with pytest.raises(AuthError):
            client.fetch_file_binary("https://files.slack.test/F1")

    def test_html_attachment_downloads(self) -> None:
        client = make_client(
            lambda r: httpx.Response(
                200, text="<html>report</html>", headers={"content-type": "text/html; charset=utf-8"}
            )
        )

        assert client.fetch_file_binary("https://files.slack.test/F1/page.html") == b"<html>report</html>"

    def test_binary_content(self) -> None:
        client = make_client(
            lambda r: httpx.Response(200, content=b"\x00\x01", headers={"content-type": "application/pdf"})
        )

        assert client.fetch_file_binary("https://files.slack.test/F1") == b"\x00\x01"


class TestUnreadCounts:
    def test_normalizes_all_conversation_kinds(self) -> None:
        payload = {
            "ok": True,
            "channels": [{"id": "C1", "name": "general", "unread_count_display": 3, "mention_count": 1}],
            "groups": [{"id": "G1", "name": "secret", "unread_count": 2, "is_muted": True}],
            "mpims": [{"id": "G2", "name": "mpdm-a--b", "unread_count": 1}],
            "ims": [{"id": "D1", "user_id": "U9", "dm_count": 4}],
        }
        client = make_client(lambda r: httpx.Response(200, json=payload))

        entries = {e["id"]: e for e in client.get_unread_counts()}

        assert entries["C1"]["unread_count"] == 3
        assert entries["C1"]["mention_count"] == 1
        assert entries["G1"]["is_private"] and entries["G1"]["is_muted"]
        assert entries["G2"]["is_mpim"]
        assert entries["D1"]["is_im"]
        assert entries["D1"]["unread_count"] == 4
        assert entries["D1"]["user"] == "U9"


class TestUsersInfo:
    def test_failed_ids_are_left_out(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            user = form(request)["user"]
            if user == "U2":
                return httpx.Response(200, json={"ok": False, "error": "user_not_found"})
            return httpx.Response(200, json={"ok": True, "user": {"id": user}})

        client = make_client(handler)

        assert client.get_users_info(["U1", "U2", "U3"]) == [{"id": "U1"}, {"id": "U3"}]


class TestListConversations:
    def test_follows_cursor_until_limit(self) -> None:
        pages = {
            None: {"ok": True, "channels": [{"id": "C1"}, {"id": "C2"}], "response_metadata": {"next_cursor": "x"}},
            "x": {"ok": True, "channels": [{"id": "C3"}], "response_metadata": {"next_cursor": ""}},
        }

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=pages[form(request).get("cursor")])

        client = make_client(handler)

        assert [c["id"] for c in client.list_conversations("public_channel", limit=10)] == ["C1", "C2", "C3"]
