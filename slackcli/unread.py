"""
Unread reconciliation.

Works out what is unread per conversation from the ``users.counts``
snapshot and each conversation's ``last_read`` watermark, and optionally
advances each watermark to the newest message actually shown.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .utils import NotFoundError, SlackApiError, ts_key
from .utils.const import HISTORY_PAGE_LIMIT, UNREAD_FETCH_MARGIN

logger = logging.getLogger(__name__)


@dataclass
class UnreadReport:
    """Outcome of one unread reconciliation run."""

    channels: List[dict] = field(default_factory=list)
    # channel_id -> unread messages, oldest first
    messages: Dict[str, List[dict]] = field(default_factory=dict)
    # channel_id -> newest ts shown (candidate watermark)
    latest: Dict[str, str] = field(default_factory=dict)
    marked: List[str] = field(default_factory=list)
    mark_failures: Dict[str, str] = field(default_factory=dict)
    fetch_failures: Dict[str, str] = field(default_factory=dict)
    messages_requested: bool = False
    # --channel named a conversation that exists but has nothing unread
    target_has_no_unread: bool = False
    # ... or whose unread messages are hidden because it is muted
    target_is_muted: bool = False

    @property
    def summary(self) -> dict:
        return summarize(self.channels)

    @property
    def messages_shown(self) -> int:
        return sum(len(msgs) for msgs in self.messages.values())

    @property
    def caught_up(self) -> bool:
        return self.messages_requested and self.messages_shown == 0 and not self.fetch_failures


def select_unread_channels(
    counts: List[dict],
    channel_id: Optional[str] = None,
    include_muted: bool = False,
) -> List[dict]:
    """
    Filter the counters snapshot down to conversations worth showing.

    Raises NotFoundError when ``channel_id`` is not among ``counts`` at all;
    returns an empty list when it exists but has nothing unread.
    """
    unread = [ch for ch in counts if (ch.get("unread_count") or 0) > 0]
    if not include_muted:
        unread = [ch for ch in unread if not ch.get("is_muted")]

    if channel_id:
        unread = [ch for ch in unread if ch.get("id") == channel_id]
        if not unread and not any(ch.get("id") == channel_id for ch in counts):
            raise NotFoundError(
                f"Channel {channel_id} not found in your conversations",
                hint='Run "slackcli conversations list" to see available conversations.',
            )

    # sorted() is stable, so ties keep snapshot order
    return sorted(unread, key=lambda ch: ch.get("unread_count") or 0, reverse=True)


def summarize(channels: List[dict]) -> dict:
    return {
        "conversations": len(channels),
        "unread": sum(ch.get("unread_count") or 0 for ch in channels),
        "mentions": sum(ch.get("mention_count") or 0 for ch in channels),
    }


def fetch_unread_messages(client, channel: dict) -> Tuple[List[dict], Optional[str]]:
    """
    Fetch messages newer than the conversation's ``last_read``.

    The history range query may include the watermark message itself, so
    results are re-filtered to ``ts > last_read``.

    Returns (messages oldest first, newest ts or None).
    """
    info = client.get_conversation_info(channel["id"])
    last_read = info.get("last_read") or "0"

    history = client.get_conversation_history(
        channel["id"],
        oldest=last_read,
        limit=min((channel.get("unread_count") or 0) + UNREAD_FETCH_MARGIN, HISTORY_PAGE_LIMIT),
    )
    watermark = ts_key(last_read)
    messages = [m for m in history if ts_key(m.get("ts")) > watermark]
    if not messages:
        return [], None

    messages.sort(key=lambda m: ts_key(m.get("ts")))
    return messages, messages[-1]["ts"]


def mark_channels_read(client, latest: Dict[str, str]) -> Tuple[List[str], Dict[str, str]]:
    """
    Advance each conversation's watermark to its own newest shown ts.

    A failure on one conversation does not stop the others.

    Returns (marked channel ids, {channel_id: error}).
    """
    marked = []
    failures = {}
    for channel_id, ts in latest.items():
        try:
            client.mark_conversation(channel_id, ts)
            marked.append(channel_id)
        except SlackApiError as e:
            logger.warning("Failed to mark %s as read: %s", channel_id, e)
            failures[channel_id] = str(e)
    return marked, failures


def reconcile_unread(
    client,
    channel_id: Optional[str] = None,
    include_muted: bool = False,
    show: bool = False,
    mark_read: bool = False,
) -> UnreadReport:
    """
    Compute unread state and optionally mark it read.

    Marking read needs the newest shown ts per conversation, so
    ``mark_read`` implies fetching the messages.
    """
    counts = client.get_unread_counts()
    channels = select_unread_channels(counts, channel_id, include_muted)

    report = UnreadReport(channels=channels)
    if channel_id and not channels:
        target = next(ch for ch in counts if ch.get("id") == channel_id)
        report.target_is_muted = bool(target.get("is_muted")) and (target.get("unread_count") or 0) > 0
        report.target_has_no_unread = not report.target_is_muted
        return report

    if not (show or mark_read):
        return report

    report.messages_requested = True
    for channel in channels:
        logger.info("Fetching unread messages from %s", channel.get("name") or channel["id"])
        try:
            messages, latest_ts = fetch_unread_messages(client, channel)
        except SlackApiError as e:
            logger.warning("Failed to fetch unread messages from %s: %s", channel["id"], e)
            report.fetch_failures[channel["id"]] = str(e)
            continue
        if not messages:
            continue
        report.messages[channel["id"]] = messages
        report.latest[channel["id"]] = latest_ts

    if mark_read and report.latest:
        report.marked, report.mark_failures = mark_channels_read(client, report.latest)

    return report
