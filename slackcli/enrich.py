"""
Message enrichment for conversation reads.

Turns a raw batch of messages into a display-ready batch:
- video transcripts fetched and flattened into ``transcript``
- thread replies expanded into ``thread_replies``
- authors (including reply authors) resolved into a user map

Each pass returns new message dicts; the batch passed in is never modified.
"""

import logging
from typing import Dict, List, Optional, Tuple

from .utils import SlackApiError, lookup_users, parse_vtt_to_text

logger = logging.getLogger(__name__)


def _has_transcript(f: dict) -> bool:
    return (f.get("transcription") or {}).get("status") == "complete" and bool(f.get("vtt"))


def collect_user_ids(messages: List[dict]) -> List[str]:
    """Distinct non-empty authors of messages and their thread replies, in first-seen order."""
    seen = {}
    for msg in messages:
        if msg.get("user"):
            seen[msg["user"]] = True
        for reply in msg.get("thread_replies") or []:
            if reply.get("user"):
                seen[reply["user"]] = True
    return list(seen)


def resolve_users(client, messages: List[dict], users: Optional[Dict[str, dict]] = None) -> Dict[str, dict]:
    """Map every author in the batch to a profile, fetching only unknown ids."""
    return lookup_users(client, collect_user_ids(messages), users)


def attach_transcripts(client, messages: List[dict]) -> List[dict]:
    """Fetch VTT transcripts for finished video transcriptions."""
    videos = sum(1 for m in messages if any(_has_transcript(f) for f in m.get("files") or []))
    if videos:
        logger.info("Fetching transcripts for %d video message(s)", videos)

    enriched = []
    for msg in messages:
        transcripts = []
        for f in msg.get("files") or []:
            if not _has_transcript(f):
                continue
            try:
                text = parse_vtt_to_text(client.fetch_file_text(f["vtt"]))
            except SlackApiError as e:
                logger.warning("Failed to fetch transcript for file %s: %s", f.get("id"), e)
                continue
            if text:
                transcripts.append(text)

        if transcripts:
            enriched.append({**msg, "transcript": "\n\n".join(transcripts)})
        else:
            enriched.append(msg)
    return enriched


def expand_threads(client, channel_id: str, messages: List[dict]) -> List[dict]:
    """Attach replies (minus the thread root) to every message that has them."""
    enriched = []
    for msg in messages:
        if (msg.get("reply_count") or 0) <= 0:
            enriched.append(msg)
            continue
        try:
            replies = client.get_conversation_replies(channel_id, msg["ts"])
        except SlackApiError as e:
            logger.warning("Failed to fetch thread replies for message %s: %s", msg.get("ts"), e)
            enriched.append(msg)
            continue
        # First entry is the thread root, already in the batch
        enriched.append({**msg, "thread_replies": list(replies[1:])})
    return enriched


def enrich_messages(
    client,
    channel_id: str,
    messages: List[dict],
    include_transcripts: bool = True,
    include_threads: bool = False,
    users: Optional[Dict[str, dict]] = None,
) -> Tuple[List[dict], Dict[str, dict]]:
    """
    Run all enrichment passes over a batch.

    Users are resolved last so that reply authors are named too.

    Returns (messages, users).
    """
    if include_transcripts:
        messages = attach_transcripts(client, messages)
    if include_threads:
        messages = expand_threads(client, channel_id, messages)
    return messages, resolve_users(client, messages, users)
