"""Utility functions for slackcli."""

from .const import (
    API_URL,
    CREDENTIALS_FILE,
    DEFAULT_CONVERSATION_TYPES,
    DEFAULT_DOWNLOAD_DIR,
    LOGIN_HINT,
)

from .errors import (
    SlackCliError,
    ValidationError,
    NotFoundError,
    SlackApiError,
    AuthError,
    RateLimitError,
)

from .api import (
    SlackClient,
    get_client,
)

from .resolution import (
    lookup_users,
    user_display_name,
    user_summary,
    get_channel_names,
    resolve_recipient,
)

from .dates import (
    parse_post_at,
    validate_post_at,
    timestamp_to_datetime,
    ts_key,
    now_ts,
)

from .vtt import (
    parse_vtt_to_text,
)

from .formatting import (
    success,
    info,
    warning,
    error,
    fail,
    print_yaml,
    print_json,
    format_timestamp,
    format_file_size,
    truncate_text,
    format_message,
    format_conversation_history,
    message_to_json,
    format_channel_list,
    format_unread_summary,
    file_to_json,
    format_file_list,
    format_scheduled_messages,
    draft_text,
    draft_status,
    format_drafts,
)
