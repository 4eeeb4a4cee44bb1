"""Best-effort remediation hints for storage errors.

Classification is plain substring matching on the error text. It only picks
which hint to print; callers must never branch on it.
"""

from typing import Tuple, Union

from .exceptions import StorageApiError

AUTH_HINT = (
    "Auth issue. Verify API key, RLS policies, or use Service Role Key. "
    "Key might be expired or invalid."
)
NOT_FOUND_HINT = "Resource (bucket, file) not found. Check names and paths."
TIMEOUT_HINT = "Network timeout. Check connectivity, Supabase status, or firewall."
LIMIT_HINT = "Rate limit or resource limit exceeded. Check Supabase plan."
EXISTS_HINT = (
    "File already exists. Use 'upsert: true' or choose a different path if not intended."
)

# Order matters: a message can hit several groups and the first one wins
HINT_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("unauthorized", "access denied", "jwt", "token"), AUTH_HINT),
    (("not found", "does not exist"), NOT_FOUND_HINT),
    (("timeout",), TIMEOUT_HINT),
    (("limit",), LIMIT_HINT),
    (("already exists",), EXISTS_HINT),
)


def error_message(error: Union[BaseException, str, None]) -> str:
    """Extract the human message from an error or message string."""
    if error is None:
        return ""
    if isinstance(error, str):
        return error
    if isinstance(error, StorageApiError):
        return error.message or ""
    if isinstance(error, Exception):
        return StorageApiError.from_exception(error).message
    return str(error)


def get_error_hint(error: Union[BaseException, str, None]) -> str:
    """Pick a remediation hint for an error."""
    message = error_message(error)
    lowered = message.lower()
    for keywords, hint in HINT_RULES:
        if any(keyword in lowered for keyword in keywords):
            return hint
    return f'Consult Supabase docs for: "{message or "Unknown Supabase error"}"'
