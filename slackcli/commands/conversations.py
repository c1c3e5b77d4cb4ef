"""Conversation commands: list, read, unread, mark-read."""

import typer
from typing import Optional

from ..enrich import enrich_messages
from ..unread import reconcile_unread
from ..utils import (
    DEFAULT_CONVERSATION_TYPES,
    LOGIN_HINT,
    SlackCliError,
    fail,
    format_channel_list,
    format_conversation_history,
    format_message,
    format_unread_summary,
    get_client,
    lookup_users,
    message_to_json,
    now_ts,
    print_json,
    print_yaml,
    success,
    user_summary,
    warning,
)
from ..utils.formatting import conversation_prefix

app = typer.Typer(help="Manage conversations (channels, DMs, groups)")

WORKSPACE_HELP = "Workspace to use (id or name)"


@app.command("list")
def list_conversations(
    types: str = typer.Option(
        DEFAULT_CONVERSATION_TYPES,
        "--types",
        help="Conversation types (comma-separated: public_channel,private_channel,mpim,im)",
    ),
    limit: int = typer.Option(100, "--limit", help="Number of conversations to return"),
    exclude_archived: bool = typer.Option(False, "--exclude-archived", help="Exclude archived conversations"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List all conversations."""
    try:
        with get_client(workspace) as client:
            channels = client.list_conversations(types, limit=limit, exclude_archived=exclude_archived)
            # DM peers, resolved in one batch
            users = lookup_users(client, (ch.get("user") for ch in channels if ch.get("is_im")))
    except SlackCliError as e:
        e.hint = e.hint or LOGIN_HINT
        fail(e)

    if as_json:
        print_json(
            {
                "conversation_count": len(channels),
                "conversations": [
                    {
                        "id": ch.get("id"),
                        "name": ch.get("name"),
                        "is_im": ch.get("is_im", False),
                        "is_mpim": ch.get("is_mpim", False),
                        "is_private": ch.get("is_private", False),
                        "is_archived": ch.get("is_archived", False),
                        "user": ch.get("user"),
                    }
                    for ch in channels
                ],
                "users": [user_summary(u) for u in users.values()],
            }
        )
    else:
        print(format_channel_list(channels, users))


@app.command("read")
def read(
    channel_id: str = typer.Argument(..., help="Channel ID to read from"),
    thread_ts: Optional[str] = typer.Option(None, "--thread-ts", help="Thread timestamp to read a specific thread"),
    exclude_replies: bool = typer.Option(
        False, "--exclude-replies", help="Exclude threaded replies (only top-level messages)"
    ),
    limit: int = typer.Option(20, "--limit", help="Number of messages to return"),
    oldest_first: bool = typer.Option(False, "--oldest-first", help="Return messages oldest-first"),
    oldest: Optional[str] = typer.Option(None, "--oldest", help="Start of time range"),
    latest: Optional[str] = typer.Option(None, "--latest", help="End of time range"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output in JSON format"),
    include_transcripts: bool = typer.Option(
        True,
        "--include-transcripts/--no-include-transcripts",
        help="Include video transcripts in output",
    ),
    include_threads: bool = typer.Option(False, "--include-threads", help="Expand thread replies inline"),
):
    """Read conversation history or a specific thread (newest first by default).

    Examples:

        slackcli conversations read C0A7RJWRZPT --limit 50 --include-threads

        slackcli conversations read C0A7RJWRZPT --thread-ts 1767815267.099869 --json
    """
    try:
        with get_client(workspace) as client:
            if thread_ts:
                messages = client.get_conversation_replies(
                    channel_id, thread_ts, limit=limit, oldest=oldest, latest=latest
                )
            else:
                messages = client.get_conversation_history(
                    channel_id, limit=limit, oldest=oldest, latest=latest
                )
                if exclude_replies:
                    messages = [
                        m for m in messages if not m.get("thread_ts") or m.get("thread_ts") == m.get("ts")
                    ]

            if oldest_first:
                messages = list(reversed(messages))

            messages, users = enrich_messages(
                client,
                channel_id,
                messages,
                include_transcripts=include_transcripts,
                include_threads=include_threads,
            )
    except SlackCliError as e:
        fail(e)

    if as_json:
        print_json(
            {
                "channel_id": channel_id,
                "message_count": len(messages),
                "messages": [message_to_json(m) for m in messages],
                "users": [user_summary(u) for u in users.values()],
            }
        )
    else:
        print(format_conversation_history(channel_id, messages, users, include_threads))


@app.command("unread")
def unread(
    channel: Optional[str] = typer.Option(None, "--channel", help="Only this channel"),
    show: bool = typer.Option(False, "--show", help="Show the unread messages, not just the summary"),
    mark_read: bool = typer.Option(False, "--mark-read", help="Mark messages as read after viewing"),
    include_muted: bool = typer.Option(False, "--include-muted", help="Include muted channels"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """View unread messages across all conversations.

    --mark-read advances each conversation to the newest message shown
    for it, so it implies --show.
    """
    try:
        with get_client(workspace) as client:
            report = reconcile_unread(
                client,
                channel_id=channel,
                include_muted=include_muted,
                show=show,
                mark_read=mark_read,
            )
            users = lookup_users(
                client, (m.get("user") for msgs in report.messages.values() for m in msgs)
            )
    except SlackCliError as e:
        fail(e)

    if as_json:
        print_json(
            {
                "summary": report.summary,
                "channels": [
                    {
                        **ch,
                        "messages": [message_to_json(m) for m in report.messages.get(ch["id"], [])]
                        if report.messages_requested
                        else None,
                        "marked_read_at": report.latest.get(ch["id"]) if ch["id"] in report.marked else None,
                    }
                    for ch in report.channels
                ],
                "users": [user_summary(u) for u in users.values()],
                "fetch_failures": report.fetch_failures,
                "mark_failures": report.mark_failures,
            }
        )
        return

    if report.target_is_muted:
        warning("This channel is muted; pass --include-muted to see its unread messages")
        return

    if report.target_has_no_unread:
        success("No unread messages in this channel")
        return

    if not report.messages_requested:
        print(format_unread_summary(report.channels, report.summary))
        if report.channels:
            print("Use --show to view the actual messages, or --mark-read to mark all as read.\n")
        return

    for ch in report.channels:
        messages = report.messages.get(ch["id"])
        if not messages:
            continue
        print(f"\n{conversation_prefix(ch)}{ch.get('name')} ({len(messages)} unread)\n")
        for msg in messages:
            print(format_message(msg, users))

    for channel_id, err in report.fetch_failures.items():
        warning(f"Could not fetch unread messages from {channel_id}: {err}")

    if report.marked:
        success(f"Marked {len(report.marked)} conversation(s) as read")
    for channel_id, err in report.mark_failures.items():
        warning(f"Failed to mark {channel_id} as read: {err}")

    if report.fetch_failures and not report.messages_shown:
        warning(f"No unread messages shown; {len(report.fetch_failures)} conversation(s) could not be checked")
    if report.caught_up:
        success("All caught up! No unread messages.")


@app.command("mark-read")
def mark_read(
    channel_id: str = typer.Argument(..., help="Channel ID to mark as read"),
    ts: Optional[str] = typer.Option(None, "--ts", help="Mark read up to this timestamp (default: now)"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
):
    """Mark a conversation as read."""
    ts = ts or now_ts()
    try:
        with get_client(workspace) as client:
            client.mark_conversation(channel_id, ts)
    except SlackCliError as e:
        fail(e)

    print_yaml({"ok": True, "channel": channel_id, "marked_read_at": ts})
