"""Diagnostic session context and startup.

One DiagnosticSession is built at startup and handed to every operation; it
holds the only client handle for the life of the process.
"""

import logging
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

from rich.prompt import Prompt

from .client import StorageClient
from .config import validate_environment
from .console import DebugConsole
from .exceptions import ConfigurationError
from .models import SessionConfig
from .payloads import DEFAULT_TEMP_DIR
from .probe import ReachabilityProber

logger = logging.getLogger(__name__)

AskFunc = Callable[[str, str], str]


class DiagnosticSession:
    """Everything an operation needs: config, client, console, prober, temp dir."""

    def __init__(
        self,
        config: SessionConfig,
        client: StorageClient,
        console: Optional[DebugConsole] = None,
        prober: Optional[ReachabilityProber] = None,
        temp_dir: Union[str, Path] = DEFAULT_TEMP_DIR,
        ask: Optional[AskFunc] = None,
    ):
        self.config = config
        self.client = client
        self.console = console or DebugConsole()
        self.prober = prober or ReachabilityProber()
        self.temp_dir = Path(temp_dir)
        self._ask = ask

    def ask(self, question: str, default: str = "") -> str:
        """Prompt the operator; empty input returns the default."""
        if self._ask is not None:
            return self._ask(question, default)
        answer = Prompt.ask(
            f"[bold]{question}[/bold]",
            default=default,
            show_default=False,
            console=self.console.console,
        )
        return (answer or "").strip()

    def close(self) -> None:
        self.prober.close()


def initialize_session(
    console: DebugConsole,
    environ: Optional[Mapping[str, str]] = None,
    temp_dir: Union[str, Path] = DEFAULT_TEMP_DIR,
    prober: Optional[ReachabilityProber] = None,
    client_factory: Callable[[SessionConfig], StorageClient] = StorageClient.connect,
    ask: Optional[AskFunc] = None,
) -> Optional[DiagnosticSession]:
    """Validate the environment, build the client and ping the project URL.

    A failed ping is only a warning; some setups block plain GETs on the
    project root.

    Returns:
        The session, or None when startup cannot proceed
    """
    config = validate_environment(console, environ)
    if config is None:
        return None

    try:
        client = client_factory(config)
    except ConfigurationError as e:
        console.error(str(e))
        return None
    console.success("Supabase client initialized.")

    prober = prober or ReachabilityProber()
    console.info("Pinging Supabase URL...")
    result = prober.check(config.service_url)
    if result.accessible:
        console.success(f"Supabase URL accessible (Status: {result.status_code}).")
    else:
        console.warn(
            f"Supabase URL ping failed (Status: {result.status_code}, "
            f"Error: {result.error or 'N/A'}). May be okay for some setups."
        )

    logger.debug(f"Session ready for {config.service_url} ({config.key_kind.value} key)")
    return DiagnosticSession(
        config=config,
        client=client,
        console=console,
        prober=prober,
        temp_dir=temp_dir,
        ask=ask,
    )
