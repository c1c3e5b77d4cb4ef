"""ID Resolution (User/Channel)."""

import logging
import re
from typing import Dict, Iterable, Optional

from .errors import SlackApiError

logger = logging.getLogger(__name__)

USER_ID_PATTERN = re.compile(r"^[UW][A-Z0-9]{2,}$")


def lookup_users(client, user_ids: Iterable[str], users: Optional[Dict[str, dict]] = None) -> Dict[str, dict]:
    """
    Resolve user ids to profiles with one batch lookup.

    Ids already present in ``users`` are not fetched again. Returns a new
    map; ids that fail to resolve are absent from it.
    """
    resolved = dict(users or {})
    missing = sorted({uid for uid in user_ids if uid and uid not in resolved})
    if not missing:
        return resolved

    try:
        profiles = client.get_users_info(missing)
    except SlackApiError as e:
        logger.warning("User lookup failed for %d user(s): %s", len(missing), e)
        return resolved

    for user in profiles:
        if user.get("id"):
            resolved[user["id"]] = user
    return resolved


def user_display_name(users: Dict[str, dict], user_id: Optional[str], fallback: str = "Unknown") -> str:
    """Real name, then handle, then the raw id."""
    if not user_id:
        return fallback
    user = users.get(user_id) or {}
    profile = user.get("profile", {})
    return (
        user.get("real_name")
        or profile.get("real_name")
        or user.get("name")
        or user_id
    )


def user_summary(user: dict) -> dict:
    """Stable JSON shape for a user profile."""
    return {
        "id": user.get("id"),
        "name": user.get("name"),
        "real_name": user.get("real_name") or user.get("profile", {}).get("real_name"),
        "email": user.get("profile", {}).get("email"),
    }


def get_channel_names(client, channel_ids: Iterable[str]) -> Dict[str, str]:
    """Map channel ids to names; unavailable channels map to their id."""
    names = {}
    for channel_id in dict.fromkeys(channel_ids):
        try:
            channel = client.get_conversation_info(channel_id)
            names[channel_id] = channel.get("name") or channel_id
        except SlackApiError as e:
            logger.warning("Channel info unavailable for %s: %s", channel_id, e)
            names[channel_id] = channel_id
    return names


def resolve_recipient(client, recipient_id: str) -> str:
    """User ids get a DM opened; channel ids pass through."""
    if USER_ID_PATTERN.match(recipient_id):
        return client.open_conversation(recipient_id)
    return recipient_id
