"""Shared fixtures: an in-memory stand-in for SlackClient."""

from typing import Dict, List, Optional

import pytest

from slackcli.utils import SlackApiError


class FakeSlackClient:
    """Records calls and serves canned data; ``fail_on`` entries raise SlackApiError."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.users: Dict[str, dict] = {}
        self.replies: Dict[str, List[dict]] = {}
        self.file_text: Dict[str, str] = {}
        self.file_bytes: Dict[str, bytes] = {}
        self.history: Dict[str, List[dict]] = {}
        self.channel_info: Dict[str, dict] = {}
        self.unread_counts: List[dict] = []
        self.files: List[dict] = []
        self.conversations: List[dict] = []
        self.scheduled: List[dict] = []
        self.drafts: List[dict] = []
        self.fail_on: set = set()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if (name,) + args in self.fail_on or name in self.fail_on:
            raise SlackApiError(f"{name}: boom", method=name, error="boom")

    def calls_to(self, name) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    # identity
    def get_users_info(self, user_ids):
        user_ids = list(user_ids)
        self._record("get_users_info", tuple(user_ids))
        return [self.users[u] for u in user_ids if u in self.users]

    def auth_test(self):
        self._record("auth_test")
        return {"ok": True, "team_id": "T1", "team": "acme", "user": "me", "user_id": "U0"}

    # messages
    def open_conversation(self, user_id):
        self._record("open_conversation", user_id)
        return "D" + user_id

    def post_message(self, channel, text, thread_ts=None):
        self._record("post_message", channel, text, thread_ts)
        return {"ok": True, "ts": "1700000000.000100", "channel": channel}

    def schedule_message(self, channel, text, post_at, thread_ts=None):
        self._record("schedule_message", channel, text, post_at, thread_ts)
        return {"ok": True, "scheduled_message_id": "Q123", "post_at": post_at}

    def list_scheduled_messages(self, channel=None, limit=100):
        self._record("list_scheduled_messages", channel, limit)
        return self.scheduled

    def delete_scheduled_message(self, channel, scheduled_message_id):
        self._record("delete_scheduled_message", channel, scheduled_message_id)

    # conversations
    def list_conversations(self, types, limit=100, exclude_archived=False):
        self._record("list_conversations", types, limit, exclude_archived)
        return self.conversations

    def get_conversation_history(self, channel, limit=20, oldest=None, latest=None):
        self._record("get_conversation_history", channel, limit, oldest, latest)
        return self.history.get(channel, [])

    def get_conversation_replies(self, channel, ts, limit=None, oldest=None, latest=None):
        self._record("get_conversation_replies", channel, ts)
        return self.replies.get(ts, [])

    def get_conversation_info(self, channel):
        self._record("get_conversation_info", channel)
        return self.channel_info.get(channel, {"id": channel})

    def mark_conversation(self, channel, ts):
        self._record("mark_conversation", channel, ts)

    def get_unread_counts(self):
        self._record("get_unread_counts")
        return self.unread_counts

    # files
    def list_files(self, channel=None, user=None, types=None, count=100, page=None):
        self._record("list_files", channel, types, count)
        return {"files": self.files, "paging": None}

    def fetch_file_text(self, url):
        self._record("fetch_file_text", url)
        return self.file_text[url]

    def fetch_file_binary(self, url):
        self._record("fetch_file_binary", url)
        return self.file_bytes.get(url, b"data")

    # drafts
    def list_drafts(self, include_inactive=False):
        self._record("list_drafts", include_inactive)
        return self.drafts

    def create_draft(self, channel, text):
        self._record("create_draft", channel, text)
        return {"id": "Dr01", "destinations": [{"channel_id": channel}]}

    def delete_draft(self, draft_id):
        self._record("delete_draft", draft_id)


def unread_channel(channel_id: str, count: int, muted: bool = False, mentions: int = 0, **flags) -> dict:
    entry = {
        "id": channel_id,
        "name": channel_id.lower(),
        "unread_count": count,
        "mention_count": mentions,
        "is_muted": muted,
        "is_im": False,
        "is_mpim": False,
        "is_private": False,
        "is_archived": False,
    }
    entry.update(flags)
    return entry


@pytest.fixture
def fake_client() -> FakeSlackClient:
    return FakeSlackClient()


@pytest.fixture
def credentials_file(tmp_path, monkeypatch):
    """Point the credentials store at a temp file and clear env overrides."""
    from slackcli import storage

    path = tmp_path / "workspaces.yaml"
    monkeypatch.setattr(storage, "CREDENTIALS_FILE", path)
    monkeypatch.delenv("SLACK_TOKEN", raising=False)
    monkeypatch.delenv("SLACK_COOKIE", raising=False)
    return path


def make_user(user_id: str, real_name: Optional[str] = None, email: Optional[str] = None) -> dict:
    return {
        "id": user_id,
        "name": user_id.lower(),
        "real_name": real_name or f"User {user_id}",
        "profile": {"email": email},
    }
