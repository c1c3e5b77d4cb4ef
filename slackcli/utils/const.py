"""Constants for slackcli."""

import os
from pathlib import Path

API_URL = os.environ.get("SLACK_API_URL", "https://slack.com/api")
HTTP_TIMEOUT = 60.0

CONFIG_DIR = Path(
    os.environ.get("SLACKCLI_CONFIG_DIR", Path.home() / ".config" / "slackcli")
)
CREDENTIALS_FILE = CONFIG_DIR / "workspaces.yaml"

# Environment override for credentials
TOKEN_ENV = "SLACK_TOKEN"
COOKIE_ENV = "SLACK_COOKIE"

DEFAULT_CONVERSATION_TYPES = "public_channel,private_channel,mpim,im"
DEFAULT_DOWNLOAD_DIR = "./downloads"

# chat.scheduleMessage accepts at most 120 days ahead
MAX_SCHEDULE_DAYS = 120
MAX_SCHEDULE_SECONDS = MAX_SCHEDULE_DAYS * 24 * 60 * 60

# Extra history to fetch per unread conversation, capped by the API page size
UNREAD_FETCH_MARGIN = 5
HISTORY_PAGE_LIMIT = 100

AUTH_ERRORS = {
    "invalid_auth",
    "not_authed",
    "token_revoked",
    "token_expired",
    "account_inactive",
}

LOGIN_HINT = 'Run "slackcli auth list" to check your authentication.'
