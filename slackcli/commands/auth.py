"""Workspace credential commands."""

import typer
from typing import Optional

from .. import storage
from ..utils import SlackClient, SlackCliError, fail, print_yaml

app = typer.Typer(help="Manage workspace credentials")


@app.command("login")
def login(
    token: str = typer.Option(..., "--token", help="xoxp-/xoxb- token, or xoxc- browser token"),
    cookie: Optional[str] = typer.Option(None, "--cookie", help="'d' cookie (required for xoxc- tokens)"),
):
    """Verify a token with auth.test and store it.

    Examples:

        slackcli auth login --token xoxp-123-456

        slackcli auth login --token xoxc-123 --cookie xoxd-abc
    """
    try:
        with SlackClient(token, cookie=cookie) as client:
            identity = client.auth_test()
        is_default = storage.save_workspace(
            workspace_id=identity.get("team_id"),
            workspace_name=identity.get("team"),
            token=token,
            cookie=cookie,
            url=identity.get("url"),
            user_id=identity.get("user_id"),
        )
    except SlackCliError as e:
        fail(e)

    print_yaml(
        {
            "ok": True,
            "workspace_id": identity.get("team_id"),
            "workspace_name": identity.get("team"),
            "user": identity.get("user"),
            "default": is_default,
        }
    )


@app.command("list")
def list_workspaces():
    """List stored workspaces (tokens are never printed)."""
    workspaces = storage.list_workspaces()
    if not workspaces:
        print("No workspaces configured. Use 'slackcli auth login --token <token>'.")
        return

    for ws in workspaces:
        marker = "*" if ws["is_default"] else " "
        auth = "🌐 Browser" if ws.get("auth_type") == "browser" else "🔑 Standard"
        print(f"{marker} {ws.get('workspace_name')} ({ws.get('workspace_id')}) {auth}")


@app.command("use")
def use(workspace: str = typer.Argument(..., help="Workspace id or name")):
    """Set the default workspace."""
    try:
        ws = storage.set_default_workspace(workspace)
    except SlackCliError as e:
        fail(e)
    print_yaml({"ok": True, "default": ws["workspace_id"], "workspace_name": ws.get("workspace_name")})


@app.command("logout")
def logout(workspace: str = typer.Argument(..., help="Workspace id or name")):
    """Remove stored credentials for a workspace."""
    try:
        ws = storage.remove_workspace(workspace)
    except SlackCliError as e:
        fail(e)
    print_yaml({"ok": True, "removed": ws["workspace_id"]})
