"""Draft commands (browser session tokens only)."""

import typer
from typing import Optional

from ..utils import (
    SlackCliError,
    draft_status,
    draft_text,
    fail,
    format_drafts,
    get_client,
    print_json,
    print_yaml,
    success,
)

app = typer.Typer(help="Manage message drafts (requires browser auth)")

WORKSPACE_HELP = "Workspace to use (id or name)"


@app.command("list")
def list_drafts(
    show_all: bool = typer.Option(False, "--all", help="Include sent and deleted drafts"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
    as_json: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List drafts."""
    try:
        with get_client(workspace) as client:
            drafts = client.list_drafts(include_inactive=show_all)
    except SlackCliError as e:
        fail(e)

    if as_json:
        print_json(
            {
                "draft_count": len(drafts),
                "drafts": [
                    {
                        "id": d.get("id"),
                        "channel_id": (d.get("destinations") or [{}])[0].get("channel_id"),
                        "text": draft_text(d),
                        "status": draft_status(d),
                    }
                    for d in drafts
                ],
            }
        )
        return

    if not drafts:
        success("No drafts found")
        return

    print(format_drafts(drafts, show_status=show_all))
    success(f"Found {len(drafts)} draft(s)")


@app.command("create")
def create(
    channel_id: str = typer.Option(..., "--channel-id", help="Channel ID to create draft for"),
    text: str = typer.Option(..., "--text", help="Draft message text"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
):
    """Create a new draft."""
    try:
        with get_client(workspace) as client:
            draft = client.create_draft(channel_id, text)
    except SlackCliError as e:
        fail(e)

    print_yaml({"ok": True, "draft_id": draft.get("id"), "channel": channel_id})


@app.command("delete")
def delete(
    draft_id: str = typer.Option(..., "--draft-id", help="Draft ID to delete"),
    workspace: Optional[str] = typer.Option(None, "--workspace", help=WORKSPACE_HELP),
):
    """Delete a draft."""
    try:
        with get_client(workspace) as client:
            client.delete_draft(draft_id)
    except SlackCliError as e:
        fail(e)

    print_yaml({"ok": True, "deleted": draft_id})
