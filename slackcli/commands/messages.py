"""Send, schedule and manage messages."""

import typer
from typing import Optional

from ..utils import (
    SlackCliError,
    fail,
    format_scheduled_messages,
    format_timestamp,
    get_channel_names,
    get_client,
    parse_post_at,
    print_json,
    print_yaml,
    resolve_recipient,
    validate_post_at,
)

app = typer.Typer(help="Send and manage messages")
scheduled_app = typer.Typer(help="Manage scheduled messages")
app.add_typer(scheduled_app, name="scheduled")

WORKSPACE_HELP = "Workspace to use (id or name)"


@app.command("send")
def send(
    recipient_id: str = typer.Option(..., "--recipient-id", help="Channel ID or User ID"),
    message: str = typer.Option(..., "--message", help="Message text content"),
    thread_ts: Optional[str] = typer.Option(None, "--thread-ts", help="Send as reply to thread"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
):
    """Send a message to a channel or user.

    A user ID (U...) opens a direct message first.

    Examples:

        slackcli messages send --recipient-id C0A7RJWRZPT --message "Hello!"

        slackcli messages send --recipient-id U01ABCDEF --message "Ping"
    """
    try:
        with get_client(workspace) as client:
            channel_id = resolve_recipient(client, recipient_id)
            data = client.post_message(channel_id, message, thread_ts=thread_ts)
    except SlackCliError as e:
        fail(e)

    result = {"ok": True, "channel": channel_id, "message_ts": data.get("ts")}
    if thread_ts:
        result["thread_ts"] = thread_ts
    print_yaml(result)


@app.command("schedule")
def schedule(
    recipient_id: str = typer.Option(..., "--recipient-id", help="Channel ID or User ID"),
    message: str = typer.Option(..., "--message", help="Message text content"),
    time: str = typer.Option(
        ...,
        "--time",
        help='When to send (ISO 8601, e.g. "2025-01-20T14:30:00", or Unix timestamp)',
    ),
    thread_ts: Optional[str] = typer.Option(None, "--thread-ts", help="Send as reply to thread"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
):
    """Schedule a message for future delivery (at most 120 days ahead).

    Examples:

        slackcli messages schedule --recipient-id C0A7RJWRZPT --message "Standup" --time 2026-01-20T09:00:00
    """
    try:
        post_at = validate_post_at(parse_post_at(time))
        with get_client(workspace) as client:
            channel_id = resolve_recipient(client, recipient_id)
            data = client.schedule_message(channel_id, message, post_at, thread_ts=thread_ts)
    except SlackCliError as e:
        fail(e)

    print_yaml(
        {
            "ok": True,
            "channel": channel_id,
            "scheduled_message_id": data.get("scheduled_message_id"),
            "post_at": post_at,
            "will_be_sent": format_timestamp(post_at),
        }
    )


@scheduled_app.command("list")
def scheduled_list(
    channel: Optional[str] = typer.Option(None, "--channel", help="Filter by channel ID"),
    limit: int = typer.Option(100, "--limit", help="Maximum number of messages to return"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List pending scheduled messages."""
    try:
        with get_client(workspace) as client:
            messages = client.list_scheduled_messages(channel=channel, limit=limit)
            names = get_channel_names(client, (m.get("channel_id") for m in messages))
    except SlackCliError as e:
        fail(e)

    if as_json:
        print_json(
            {
                "scheduled_message_count": len(messages),
                "scheduled_messages": [
                    {**m, "channel_name": names.get(m.get("channel_id"))} for m in messages
                ],
            }
        )
    else:
        print(format_scheduled_messages(messages, names))


@scheduled_app.command("delete")
def scheduled_delete(
    channel: str = typer.Option(..., "--channel", help="Channel ID where the message is scheduled"),
    message_id: str = typer.Option(..., "--message-id", help="Scheduled message ID to delete"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
):
    """Delete a scheduled message before it is sent."""
    try:
        with get_client(workspace) as client:
            client.delete_scheduled_message(channel, message_id)
    except SlackCliError as e:
        fail(e)

    print_yaml({"ok": True, "channel": channel, "deleted": message_id})
