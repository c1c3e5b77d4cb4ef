"""Formatting and Rendering."""

import json
import sys
from typing import Dict, List, Optional

import yaml

from .dates import timestamp_to_datetime
from .resolution import user_display_name

FILE_ICONS = {
    "png": "🖼️", "jpg": "🖼️", "jpeg": "🖼️", "gif": "🖼️", "webp": "🖼️",
    "pdf": "📄", "docx": "📝", "doc": "📝",
    "xlsx": "📊", "xls": "📊", "csv": "📊",
    "pptx": "📽️", "ppt": "📽️",
    "mp4": "🎬", "mov": "🎬", "webm": "🎬",
    "mp3": "🎵", "wav": "🎵",
    "zip": "📦", "json": "📋", "txt": "📄",
}


# =============================================================================
# Console helpers
# =============================================================================

def success(message: str):
    print(f"✅ {message}")


def info(message: str):
    print(f"ℹ️  {message}")


def warning(message: str):
    print(f"⚠️  {message}")


def error(message: str, hint: Optional[str] = None):
    print(f"❌ Error: {message}", file=sys.stderr)
    if hint:
        print(f"   {hint}", file=sys.stderr)


def fail(e):
    """Report a SlackCliError (or any exception) and exit 1."""
    error(str(e), getattr(e, "hint", None))
    sys.exit(1)


def print_yaml(data):
    print(yaml.dump(data, indent=2, sort_keys=False, allow_unicode=True))


def print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


# =============================================================================
# Scalars
# =============================================================================

def format_timestamp(ts, with_seconds: bool = True) -> str:
    """Slack ts (or unix seconds) as local time."""
    if not ts:
        return "Unknown"
    dt = timestamp_to_datetime(ts).astimezone()
    return dt.strftime("%Y-%m-%d %H:%M:%S" if with_seconds else "%Y-%m-%d %H:%M")


def format_file_size(size: Optional[int]) -> str:
    if not size:
        return "unknown size"
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {units[unit]}"


def get_file_icon(filetype: Optional[str]) -> str:
    return FILE_ICONS.get(filetype or "", "📎")


def truncate_text(text: str, max_len: int = 60) -> str:
    """Truncate text to max length."""
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


def conversation_prefix(channel: dict) -> str:
    if channel.get("is_im"):
        return "👤 "
    if channel.get("is_mpim"):
        return "👥 "
    if channel.get("is_private"):
        return "🔒 "
    return "#"


# =============================================================================
# Messages
# =============================================================================

def _author(msg: dict, users: Dict[str, dict]) -> str:
    if msg.get("user"):
        return user_display_name(users, msg["user"])
    return msg.get("bot_id") or msg.get("username") or "Unknown"


def _is_reply(msg: dict) -> bool:
    return bool(msg.get("thread_ts")) and msg.get("thread_ts") != msg.get("ts")


def _transcript_lines(msg: dict, pad: str) -> List[str]:
    if not msg.get("transcript"):
        return []
    lines = [f"{pad}📹 Video Transcript:"]
    lines += [f"{pad}  {line}" for line in msg["transcript"].split("\n")]
    return lines


def _reaction_line(msg: dict, pad: str) -> List[str]:
    reactions = msg.get("reactions") or []
    if not reactions:
        return []
    return [pad + "  ".join(f":{r.get('name')}: {r.get('count', 0)}" for r in reactions)]


def format_message(msg: dict, users: Dict[str, dict], indent: int = 0) -> str:
    """Render one message with its transcript, reactions and files."""
    pad = " " * indent
    body = pad + "  "
    thread_marker = " (in thread)" if _is_reply(msg) else ""
    lines = [f"{pad}[{format_timestamp(msg.get('ts'))}] @{_author(msg, users)}{thread_marker}"]

    for line in (msg.get("text") or "").split("\n"):
        lines.append(f"{body}{line}")

    ts_line = f"{body}ts: {msg.get('ts')}"
    if _is_reply(msg):
        ts_line += f" | thread_ts: {msg.get('thread_ts')}"
    lines.append(ts_line)

    lines += _transcript_lines(msg, body)
    lines += _reaction_line(msg, body)

    for f in msg.get("files") or []:
        if f.get("mode") == "tombstone":
            continue
        name = f.get("name") or f.get("title") or "Untitled"
        lines.append(f"{body}{get_file_icon(f.get('filetype'))} {name}")
        lines.append(f"{body}   Type: {f.get('pretty_type') or f.get('filetype') or 'unknown'}")
        url = f.get("url_private_download") or f.get("url_private")
        if url:
            lines.append(f"{body}   URL: {url}")
        transcription = f.get("transcription")
        if transcription:
            status = transcription.get("status")
            icon = {"complete": "✅", "processing": "⏳"}.get(status, "❌")
            lines.append(f"{body}   Transcript: {icon} {status}")

    if msg.get("reply_count") and not _is_reply(msg):
        lines.append(f"{body}💬 {msg['reply_count']} replies")

    return "\n".join(lines) + "\n"


def format_thread_reply(msg: dict, users: Dict[str, dict], is_last: bool) -> str:
    branch = "└─" if is_last else "├─"
    pad = "  " + ("   " if is_last else "│  ") + "   "
    lines = [f"  {branch} [{format_timestamp(msg.get('ts'))}] @{_author(msg, users)}"]
    for line in (msg.get("text") or "").split("\n"):
        lines.append(f"{pad}{line}")
    lines.append(f"{pad}ts: {msg.get('ts')} | thread_ts: {msg.get('thread_ts')}")
    lines += _transcript_lines(msg, pad)
    lines += _reaction_line(msg, pad)
    return "\n".join(lines) + "\n"


def format_conversation_history(
    channel: str,
    messages: List[dict],
    users: Dict[str, dict],
    include_threads: bool = False,
) -> str:
    parts = [f"💬 #{channel} ({len(messages)} messages)\n"]
    for msg in messages:
        block = format_message(msg, users)
        replies = msg.get("thread_replies") or []
        if include_threads and replies:
            block += f"  💬 {len(replies)} replies:\n\n"
            for idx, reply in enumerate(replies):
                is_last = idx == len(replies) - 1
                block += format_thread_reply(reply, users, is_last)
                if not is_last:
                    block += "  │\n"
        parts.append(block)
    return "\n".join(parts)


def message_to_json(msg: dict) -> dict:
    replies = msg.get("thread_replies")
    return {
        "ts": msg.get("ts"),
        "thread_ts": msg.get("thread_ts"),
        "user": msg.get("user"),
        "text": msg.get("text"),
        "type": msg.get("type"),
        "reply_count": msg.get("reply_count"),
        "is_thread_parent": (msg.get("reply_count") or 0) > 0,
        "reactions": msg.get("reactions"),
        "bot_id": msg.get("bot_id"),
        "files": msg.get("files"),
        "transcript": msg.get("transcript"),
        "thread_replies": [message_to_json(r) for r in replies] if replies is not None else None,
    }


# =============================================================================
# Conversations
# =============================================================================

def format_channel_list(channels: List[dict], users: Dict[str, dict]) -> str:
    groups = {"public": [], "private": [], "mpim": [], "im": []}
    for ch in channels:
        if ch.get("is_im"):
            groups["im"].append(ch)
        elif ch.get("is_mpim"):
            groups["mpim"].append(ch)
        elif ch.get("is_private"):
            groups["private"].append(ch)
        else:
            groups["public"].append(ch)

    lines = [f"📋 Conversations ({len(channels)})"]

    if groups["public"]:
        lines += ["", "Public Channels:"]
        for idx, ch in enumerate(groups["public"], 1):
            archived = " [archived]" if ch.get("is_archived") else ""
            lines.append(f"  {idx}. #{ch.get('name')} ({ch.get('id')}){archived}")
            topic = (ch.get("topic") or {}).get("value")
            if topic:
                lines.append(f"     {topic}")

    if groups["private"]:
        lines += ["", "Private Channels:"]
        for idx, ch in enumerate(groups["private"], 1):
            archived = " [archived]" if ch.get("is_archived") else ""
            lines.append(f"  {idx}. 🔒 {ch.get('name')} ({ch.get('id')}){archived}")

    if groups["mpim"]:
        lines += ["", "Group Messages:"]
        for idx, ch in enumerate(groups["mpim"], 1):
            lines.append(f"  {idx}. 👥 {ch.get('name') or 'Group'} ({ch.get('id')})")

    if groups["im"]:
        lines += ["", "Direct Messages:"]
        for idx, ch in enumerate(groups["im"], 1):
            name = user_display_name(users, ch.get("user"), fallback="Unknown User")
            lines.append(f"  {idx}. 👤 @{name} ({ch.get('id')})")

    return "\n".join(lines) + "\n"


def format_unread_summary(channels: List[dict], summary: dict) -> str:
    lines = ["📬 Unread Messages"]
    totals = f"   {summary['unread']} unread across {summary['conversations']} conversations"
    if summary["mentions"]:
        totals += f" ({summary['mentions']} mentions)"
    lines += [totals, ""]

    if not channels:
        lines.append("  All caught up! No unread messages.")
        return "\n".join(lines) + "\n"

    sections = [
        ("Public Channels:", lambda c: not (c.get("is_im") or c.get("is_mpim") or c.get("is_private"))),
        ("Private Channels:", lambda c: c.get("is_private") and not c.get("is_mpim")),
        ("Group Messages:", lambda c: c.get("is_mpim")),
        ("Direct Messages:", lambda c: c.get("is_im")),
    ]
    for title, belongs in sections:
        members = [c for c in channels if belongs(c)]
        if not members:
            continue
        lines.append(title)
        for ch in members:
            mentions = f" @{ch['mention_count']}" if ch.get("mention_count") else ""
            muted = " (muted)" if ch.get("is_muted") else ""
            lines.append(
                f"  {conversation_prefix(ch)}{ch.get('name')} ({ch.get('unread_count')}){mentions}{muted}"
            )
            lines.append(f"     ID: {ch.get('id')}")
        lines.append("")

    return "\n".join(lines)


# =============================================================================
# Files
# =============================================================================

def file_to_json(f: dict, users: Dict[str, dict]) -> dict:
    user = users.get(f.get("user")) if f.get("user") else None
    return {
        "id": f.get("id"),
        "name": f.get("name"),
        "title": f.get("title"),
        "filetype": f.get("filetype"),
        "size": f.get("size"),
        "created": f.get("created"),
        "user": f.get("user"),
        "user_name": user.get("real_name") if user else None,
        "url_private": f.get("url_private"),
        "url_private_download": f.get("url_private_download"),
    }


def format_file_list(files: List[dict], users: Dict[str, dict]) -> str:
    lines = [f"📁 Files ({len(files)})", ""]
    if not files:
        lines.append("  No files found.")
        return "\n".join(lines) + "\n"

    for idx, f in enumerate(files, 1):
        name = f.get("name") or f.get("title") or "Untitled"
        uploader = user_display_name(users, f.get("user"))
        created = format_timestamp(f["created"], with_seconds=False) if f.get("created") else "Unknown date"
        lines.append(f"{idx}. {get_file_icon(f.get('filetype'))} {name}")
        lines.append(f"   ID: {f.get('id')}")
        lines.append(
            f"   Type: {f.get('pretty_type') or f.get('filetype') or 'unknown'} | Size: {format_file_size(f.get('size'))}"
        )
        lines.append(f"   By: @{uploader} | {created}")
        url = f.get("url_private_download") or f.get("url_private")
        if url:
            lines.append(f"   URL: {url}")
        lines.append("")

    return "\n".join(lines)


# =============================================================================
# Scheduled messages & drafts
# =============================================================================

def format_scheduled_messages(messages: List[dict], channel_names: Dict[str, str]) -> str:
    lines = [f"📅 Scheduled Messages ({len(messages)})", ""]
    if not messages:
        lines.append("  No scheduled messages found.")
        return "\n".join(lines) + "\n"

    for idx, msg in enumerate(messages, 1):
        channel_id = msg.get("channel_id")
        lines.append(f"{idx}. Scheduled for: {format_timestamp(msg.get('post_at'), with_seconds=False)}")
        lines.append(f"   ID: {msg.get('id')}")
        lines.append(f"   Channel: #{channel_names.get(channel_id, channel_id)} ({channel_id})")
        lines.append(f"   Created: {format_timestamp(msg.get('date_created'), with_seconds=False)}")
        lines.append(f"   {msg.get('text', '')}")
        lines.append("")

    return "\n".join(lines)


def draft_text(draft: dict) -> str:
    """Plain text of the first rich-text section of a draft."""
    blocks = draft.get("blocks") or []
    if not blocks:
        return ""
    sections = blocks[0].get("elements") or []
    if not sections:
        return ""
    return "".join(el.get("text", "") for el in sections[0].get("elements") or [])


def draft_status(draft: dict) -> str:
    if draft.get("is_deleted"):
        return "Deleted"
    if draft.get("is_sent"):
        return "Sent"
    return "Active"


def format_drafts(drafts: List[dict], show_status: bool = False) -> str:
    lines = [f"📝 Drafts ({len(drafts)})", ""]
    for idx, draft in enumerate(drafts, 1):
        destinations = draft.get("destinations") or [{}]
        lines.append(f"{idx}. {draft.get('id')}")
        lines.append(f"   Channel: {destinations[0].get('channel_id') or 'Unknown'}")
        lines.append(f"   Preview: {truncate_text(draft_text(draft))}")
        if show_status:
            lines.append(f"   Status: {draft_status(draft)}")
        lines.append("")
    return "\n".join(lines)
