"""
Credentials storage for slackcli.

Workspaces live in a YAML file under the config directory:

    default: T0123
    workspaces:
      T0123:
        workspace_id: T0123
        workspace_name: acme
        token: xoxp-...
        cookie: null

SLACK_TOKEN / SLACK_COOKIE in the environment take precedence over the file.
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .utils.const import COOKIE_ENV, CREDENTIALS_FILE, TOKEN_ENV
from .utils.errors import AuthError, NotFoundError

SETUP_HINT = 'Run "slackcli auth login --token <token>" to add a workspace.'


def _load(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the credentials file, returning an empty structure if missing."""
    path = path or CREDENTIALS_FILE
    if not path.exists():
        return {"default": None, "workspaces": {}}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    data.setdefault("default", None)
    data.setdefault("workspaces", {})
    return data


def _save(data: Dict[str, Any], path: Optional[Path] = None):
    """Write the credentials file, readable by the owner only."""
    path = path or CREDENTIALS_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    content = yaml.dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    path.write_text(content, encoding="utf-8")
    os.chmod(path, 0o600)


def list_workspaces() -> List[Dict[str, Any]]:
    """All stored workspaces, with an ``is_default`` flag added."""
    data = _load()
    default = data.get("default")
    return [
        {**ws, "is_default": ws_id == default}
        for ws_id, ws in data["workspaces"].items()
    ]


def find_workspace(id_or_name: str) -> Optional[Dict[str, Any]]:
    """
    Find a workspace by id or name (case-insensitive).

    Returns the stored workspace dict, or None.
    """
    workspaces = _load()["workspaces"]
    if id_or_name in workspaces:
        return workspaces[id_or_name]

    needle = id_or_name.lower()
    for ws in workspaces.values():
        if (ws.get("workspace_name") or "").lower() == needle:
            return ws
    return None


def save_workspace(
    workspace_id: str,
    workspace_name: str,
    token: str,
    cookie: Optional[str] = None,
    url: Optional[str] = None,
    user_id: Optional[str] = None,
) -> bool:
    """
    Store credentials for a workspace.

    The first stored workspace becomes the default. Returns True when the
    workspace is the default after saving.
    """
    data = _load()
    data["workspaces"][workspace_id] = {
        "workspace_id": workspace_id,
        "workspace_name": workspace_name,
        "url": url,
        "user_id": user_id,
        "auth_type": "browser" if token.startswith("xoxc-") else "standard",
        "token": token,
        "cookie": cookie,
        "_saved_at": datetime.now(timezone.utc).isoformat(),
    }
    if not data.get("default") or data["default"] not in data["workspaces"]:
        data["default"] = workspace_id
    _save(data)
    return data["default"] == workspace_id


def set_default_workspace(id_or_name: str) -> Dict[str, Any]:
    ws = find_workspace(id_or_name)
    if not ws:
        raise NotFoundError(f"Workspace not found: {id_or_name}", hint='Run "slackcli auth list".')
    data = _load()
    data["default"] = ws["workspace_id"]
    _save(data)
    return ws


def remove_workspace(id_or_name: str) -> Dict[str, Any]:
    ws = find_workspace(id_or_name)
    if not ws:
        raise NotFoundError(f"Workspace not found: {id_or_name}", hint='Run "slackcli auth list".')
    data = _load()
    del data["workspaces"][ws["workspace_id"]]
    if data.get("default") == ws["workspace_id"]:
        data["default"] = next(iter(data["workspaces"]), None)
    _save(data)
    return ws


def get_credentials(workspace: Optional[str] = None) -> Dict[str, Any]:
    """
    Resolve credentials for a command.

    Order: SLACK_TOKEN env var, the ``--workspace`` selection, the default
    workspace, the only stored workspace.
    """
    token = os.environ.get(TOKEN_ENV)
    if token and not workspace:
        return {"token": token, "cookie": os.environ.get(COOKIE_ENV)}

    data = _load()
    workspaces = data["workspaces"]

    if workspace:
        ws = find_workspace(workspace)
        if not ws:
            raise AuthError(f"No credentials stored for workspace '{workspace}'", hint=SETUP_HINT)
        return ws

    if data.get("default") in workspaces:
        return workspaces[data["default"]]
    if len(workspaces) == 1:
        return next(iter(workspaces.values()))
    if not workspaces:
        raise AuthError("No workspace configured", hint=SETUP_HINT)
    raise AuthError(
        "Several workspaces configured and none is the default",
        hint='Run "slackcli auth use <workspace>" or pass --workspace.',
    )
