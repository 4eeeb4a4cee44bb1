"""Configuration loading and validation.

Reads the project URL and keys from the environment (optionally seeded from a
``.env`` file) and reports one status line per value:

    NEXT_PUBLIC_SUPABASE_URL=https://abcd.supabase.co
    SUPABASE_SERVICE_ROLE_KEY=...        (preferred)
    NEXT_PUBLIC_SUPABASE_ANON_KEY=...    (fallback, limited diagnostics)
"""

import logging
import os
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import find_dotenv, load_dotenv

from .console import DebugConsole
from .models import KeyKind, SessionConfig

logger = logging.getLogger(__name__)

ENV_SUPABASE_URL = "NEXT_PUBLIC_SUPABASE_URL"
ENV_SERVICE_KEY = "SUPABASE_SERVICE_ROLE_KEY"
ENV_ANON_KEY = "NEXT_PUBLIC_SUPABASE_ANON_KEY"

FORBIDDEN_HOST_CHARS = frozenset(" \t\r\n<>\\^|%\"{}`")


def load_env_file(env_file: Optional[str] = None) -> bool:
    """Load a .env file into the process environment.

    Variables already set in the environment are not overridden.

    Returns:
        True if a file was found and loaded
    """
    loaded = load_dotenv(env_file or find_dotenv(usecwd=True))
    logger.debug(f"dotenv loaded: {loaded} (file: {env_file or '.env'})")
    return loaded


def is_valid_url(url: Optional[str]) -> bool:
    """Check that a URL is absolute http(s) with a well-formed host and port."""
    if not url:
        return False
    try:
        parsed = urlparse(url.strip())
        # Port is parsed lazily; out-of-range or non-numeric ports raise here
        parsed.port
        hostname = parsed.hostname
        if not hostname or any(char in FORBIDDEN_HOST_CHARS for char in hostname):
            return False
        hostname.encode("idna")
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_environment(
    console: DebugConsole,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[SessionConfig]:
    """Validate the environment and build the session config.

    Args:
        console: Where the per-value status lines go
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        SessionConfig when the session can proceed, None to abort
    """
    env = os.environ if environ is None else environ
    console.info("Validating environment & initializing Supabase client...")

    supabase_url = (env.get(ENV_SUPABASE_URL) or "").strip()
    service_key = (env.get(ENV_SERVICE_KEY) or "").strip()
    anon_key = (env.get(ENV_ANON_KEY) or "").strip()

    valid = True
    if not supabase_url:
        console.error(f"{ENV_SUPABASE_URL} is not set.")
        valid = False
    elif not is_valid_url(supabase_url):
        console.error(f"Invalid {ENV_SUPABASE_URL}: {supabase_url}")
        valid = False
    else:
        console.success(f"{ENV_SUPABASE_URL}: {supabase_url}")

    api_key = service_key or anon_key
    if not api_key:
        console.error(
            f"No Supabase key found. Set {ENV_SERVICE_KEY} (recommended) or {ENV_ANON_KEY}."
        )
        valid = False
    else:
        console.success(f"Supabase Key: {'Service Role (SET)' if service_key else 'Anon (SET)'}")
        if not service_key:
            console.warn(
                f"Using Anon Key. Diagnostics will be limited; "
                f"{ENV_SERVICE_KEY} is STRONGLY recommended."
            )

    if not valid:
        console.error("Critical environment variables missing or invalid.")
        return None

    return SessionConfig(
        service_url=supabase_url,
        api_key=api_key,
        key_kind=KeyKind.SERVICE if service_key else KeyKind.ANON,
        service_key_set=bool(service_key),
        anon_key_set=bool(anon_key),
    )
