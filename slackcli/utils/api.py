"""HTTP Client for slackcli."""

import json
import logging
import time
import uuid
from typing import Iterable, List, Optional

import httpx

from .const import API_URL, AUTH_ERRORS, HTTP_TIMEOUT, LOGIN_HINT
from .errors import AuthError, RateLimitError, SlackApiError

logger = logging.getLogger(__name__)


class SlackClient:
    """Thin wrapper around the Slack Web API.

    Every method either returns the decoded payload or raises a
    ``SlackApiError`` (``AuthError`` / ``RateLimitError`` for those cases).
    """

    def __init__(
        self,
        token: str,
        cookie: Optional[str] = None,
        base_url: str = API_URL,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"}
        cookies = {"d": cookie} if cookie else None
        self.base_url = base_url.rstrip("/")
        self.http = httpx.Client(
            timeout=HTTP_TIMEOUT,
            headers=headers,
            cookies=cookies,
            transport=transport,
            follow_redirects=True,
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self.http.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def call_api(self, method: str, params: Optional[dict] = None) -> dict:
        """Call a Web API method and return the decoded response."""
        data = {}
        for key, value in (params or {}).items():
            if value is None:
                continue
            if isinstance(value, (dict, list)):
                value = json.dumps(value)
            elif isinstance(value, bool):
                value = "true" if value else "false"
            data[key] = str(value)

        logger.debug("POST %s %s", method, sorted(data))
        try:
            response = self.http.post(f"{self.base_url}/{method}", data=data)
        except httpx.HTTPError as e:
            raise SlackApiError(f"{method}: {e}", method=method) from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                f"{method}: rate limited by Slack"
                + (f" (retry after {retry_after}s)" if retry_after else ""),
                method=method,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code in (401, 403):
            raise AuthError(f"{method}: HTTP {response.status_code}", method=method, hint=LOGIN_HINT)
        if response.status_code != 200:
            raise SlackApiError(f"{method}: HTTP {response.status_code}", method=method)

        try:
            payload = response.json()
        except ValueError as e:
            raise SlackApiError(f"{method}: invalid JSON response", method=method) from e

        # Some proxies double-serialize the payload
        if isinstance(payload, str):
            payload = json.loads(payload)

        if not payload.get("ok"):
            error = payload.get("error", "unknown_error")
            if error in AUTH_ERRORS:
                raise AuthError(f"{method}: {error}", method=method, error=error, hint=LOGIN_HINT)
            raise SlackApiError(f"{method}: {error}", method=method, error=error)
        return payload

    def _fetch(self, url: str) -> httpx.Response:
        logger.debug("GET %s", url)
        try:
            response = self.http.get(url)
        except httpx.HTTPError as e:
            raise SlackApiError(f"GET {url}: {e}") from e
        if response.status_code in (401, 403):
            raise AuthError(f"GET {url}: HTTP {response.status_code}", hint=LOGIN_HINT)
        if response.status_code != 200:
            raise SlackApiError(f"GET {url}: HTTP {response.status_code}")
        # Slack redirects unauthenticated file requests to its sign-in page
        if _is_login_redirect(url, response):
            raise AuthError(f"GET {url}: received a login page instead of the file", hint=LOGIN_HINT)
        return response

    def fetch_file_text(self, url: str) -> str:
        return self._fetch(url).text

    def fetch_file_binary(self, url: str) -> bytes:
        return self._fetch(url).content

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def auth_test(self) -> dict:
        return self.call_api("auth.test")

    def get_user_info(self, user_id: str) -> dict:
        return self.call_api("users.info", {"user": user_id}).get("user", {})

    def get_users_info(self, user_ids: Iterable[str]) -> List[dict]:
        """Look up several users; ids that fail to resolve are left out."""
        users = []
        for user_id in user_ids:
            try:
                users.append(self.get_user_info(user_id))
            except SlackApiError as e:
                logger.warning("Failed to fetch user %s: %s", user_id, e)
        return users

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def open_conversation(self, user_id: str) -> str:
        data = self.call_api("conversations.open", {"users": user_id})
        return data.get("channel", {}).get("id")

    def post_message(self, channel: str, text: str, thread_ts: Optional[str] = None) -> dict:
        return self.call_api(
            "chat.postMessage",
            {"channel": channel, "text": text, "thread_ts": thread_ts},
        )

    def schedule_message(
        self, channel: str, text: str, post_at: int, thread_ts: Optional[str] = None
    ) -> dict:
        return self.call_api(
            "chat.scheduleMessage",
            {"channel": channel, "text": text, "post_at": post_at, "thread_ts": thread_ts},
        )

    def list_scheduled_messages(self, channel: Optional[str] = None, limit: int = 100) -> List[dict]:
        data = self.call_api("chat.scheduledMessages.list", {"channel": channel, "limit": limit})
        return data.get("scheduled_messages", [])

    def delete_scheduled_message(self, channel: str, scheduled_message_id: str) -> None:
        self.call_api(
            "chat.deleteScheduledMessage",
            {"channel": channel, "scheduled_message_id": scheduled_message_id},
        )

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    def list_conversations(self, types: str, limit: int = 100, exclude_archived: bool = False) -> List[dict]:
        """List conversations, following cursors until ``limit`` is reached."""
        channels = []
        cursor = None
        while len(channels) < limit:
            data = self.call_api(
                "conversations.list",
                {
                    "types": types,
                    "exclude_archived": exclude_archived,
                    "limit": min(limit - len(channels), 1000),
                    "cursor": cursor,
                },
            )
            channels.extend(data.get("channels", []))
            cursor = data.get("response_metadata", {}).get("next_cursor")
            if not cursor:
                break
        return channels[:limit]

    def get_conversation_history(
        self,
        channel: str,
        limit: int = 20,
        oldest: Optional[str] = None,
        latest: Optional[str] = None,
    ) -> List[dict]:
        data = self.call_api(
            "conversations.history",
            {"channel": channel, "limit": limit, "oldest": oldest, "latest": latest},
        )
        return data.get("messages", [])

    def get_conversation_replies(
        self,
        channel: str,
        ts: str,
        limit: Optional[int] = None,
        oldest: Optional[str] = None,
        latest: Optional[str] = None,
    ) -> List[dict]:
        data = self.call_api(
            "conversations.replies",
            {"channel": channel, "ts": ts, "limit": limit, "oldest": oldest, "latest": latest},
        )
        return data.get("messages", [])

    def get_conversation_info(self, channel: str) -> dict:
        return self.call_api("conversations.info", {"channel": channel}).get("channel", {})

    def mark_conversation(self, channel: str, ts: str) -> None:
        self.call_api("conversations.mark", {"channel": channel, "ts": ts})

    def get_unread_counts(self) -> List[dict]:
        """Unread counters for every conversation (one ``users.counts`` call)."""
        data = self.call_api("users.counts", {"mpim_aware": True, "only_relevant_ims": True})
        unread = []
        for ch in data.get("channels", []):
            unread.append(_unread_entry(ch, is_private=ch.get("is_private", False)))
        for group in data.get("groups", []):
            unread.append(
                _unread_entry(
                    group,
                    is_private=not group.get("is_mpim", False),
                    is_mpim=group.get("is_mpim", False),
                )
            )
        for group in data.get("mpims", []):
            unread.append(_unread_entry(group, is_mpim=True))
        for im in data.get("ims", []):
            entry = _unread_entry(im, is_im=True)
            entry["name"] = im.get("name") or im.get("user_id") or im.get("id")
            entry["user"] = im.get("user_id")
            entry["unread_count"] = im.get("dm_count", entry["unread_count"])
            unread.append(entry)
        return unread

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def list_files(
        self,
        channel: Optional[str] = None,
        user: Optional[str] = None,
        types: Optional[str] = None,
        count: int = 100,
        page: Optional[int] = None,
    ) -> dict:
        data = self.call_api(
            "files.list",
            {"channel": channel, "user": user, "types": types, "count": count, "page": page},
        )
        return {"files": data.get("files", []), "paging": data.get("paging")}

    # ------------------------------------------------------------------
    # Drafts (browser session only)
    # ------------------------------------------------------------------

    def list_drafts(self, include_inactive: bool = False) -> List[dict]:
        params = {} if include_inactive else {"is_active": True}
        return self.call_api("drafts.list", params).get("drafts", [])

    def create_draft(self, channel: str, text: str) -> dict:
        blocks = [
            {
                "type": "rich_text",
                "elements": [
                    {"type": "rich_text_section", "elements": [{"type": "text", "text": text}]}
                ],
            }
        ]
        data = self.call_api(
            "drafts.create",
            {
                "client_msg_id": str(uuid.uuid4()),
                "blocks": blocks,
                "destinations": [{"channel_id": channel}],
                "file_ids": [],
                "is_from_composer": False,
            },
        )
        return data.get("draft", {})

    def delete_draft(self, draft_id: str) -> None:
        self.call_api(
            "drafts.delete",
            {"draft_id": draft_id, "client_last_updated_ts": f"{time.time():.6f}"},
        )


def _unread_entry(raw: dict, is_private: bool = False, is_mpim: bool = False, is_im: bool = False) -> dict:
    return {
        "id": raw.get("id"),
        "name": raw.get("name") or raw.get("id"),
        "unread_count": raw.get("unread_count_display", raw.get("unread_count", 0)) or 0,
        "mention_count": raw.get("mention_count_display", raw.get("mention_count", 0)) or 0,
        "is_muted": raw.get("is_muted", False),
        "is_im": is_im,
        "is_mpim": is_mpim,
        "is_private": is_private,
        "is_archived": raw.get("is_archived", False),
    }


def _is_login_redirect(url: str, response: httpx.Response) -> bool:
    """An HTML page reached by a redirect off the requested host.

    HTML served directly from the file URL is a real attachment.
    """
    if not response.history:
        return False
    if not response.headers.get("content-type", "").startswith("text/html"):
        return False
    return response.url.host != httpx.URL(url).host


def get_client(workspace: Optional[str] = None) -> SlackClient:
    """Create a client for the selected (or default) workspace."""
    from .. import storage

    creds = storage.get_credentials(workspace)
    return SlackClient(creds["token"], cookie=creds.get("cookie"))