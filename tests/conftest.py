"""Shared fixtures: a captured console and a session backed by mocks."""

from io import StringIO
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from supabase_storage_debug.core.client import StorageClient
from supabase_storage_debug.core.console import DebugConsole
from supabase_storage_debug.core.models import KeyKind, ProbeResult, SessionConfig
from supabase_storage_debug.core.probe import ReachabilityProber
from supabase_storage_debug.core.session import DiagnosticSession

SUPABASE_URL = "https://abcd.supabase.co"


class CapturedConsole(DebugConsole):
    """DebugConsole writing plain text into a buffer."""

    def __init__(self):
        self.buffer = StringIO()
        super().__init__(
            Console(file=self.buffer, width=240, force_terminal=False, color_system=None)
        )

    @property
    def text(self) -> str:
        return self.buffer.getvalue()


@pytest.fixture
def captured_console() -> CapturedConsole:
    return CapturedConsole()


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(
        service_url=SUPABASE_URL,
        api_key="service-role-key",
        key_kind=KeyKind.SERVICE,
        service_key_set=True,
        anon_key_set=True,
    )


@pytest.fixture
def storage_client() -> MagicMock:
    """StorageClient mock with harmless defaults."""
    client = MagicMock(spec=StorageClient)
    client.list_buckets.return_value = []
    client.list_objects.return_value = []
    client.get_public_url.side_effect = (
        lambda bucket, path: f"{SUPABASE_URL}/storage/v1/object/public/{bucket}/{path}"
    )
    client.get_current_user.return_value = None
    return client


@pytest.fixture
def prober() -> MagicMock:
    prober = MagicMock(spec=ReachabilityProber)
    prober.check.return_value = ProbeResult(accessible=True, status_code=200)
    return prober


@pytest.fixture
def answers() -> list:
    """Queue of answers returned by session.ask, in order."""
    return []


@pytest.fixture
def session(session_config, storage_client, prober, captured_console, answers, tmp_path):
    def ask(question, default=""):
        if answers:
            return answers.pop(0)
        return default

    return DiagnosticSession(
        config=session_config,
        client=storage_client,
        console=captured_console,
        prober=prober,
        temp_dir=tmp_path / "supabase-debug-temp",
        ask=ask,
    )
