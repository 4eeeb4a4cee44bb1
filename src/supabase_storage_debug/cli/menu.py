"""Menu commands and their dispatch table."""

import logging
from enum import Enum
from typing import Callable, Dict, NamedTuple, Optional

from ..core.console import DebugConsole
from ..core.models import ErrorKind, OperationResult
from ..core.session import DiagnosticSession
from . import handlers

logger = logging.getLogger(__name__)

MENU_TITLE = "SUPABASE STORAGE DEBUGGER v1.0"


class Command(str, Enum):
    """Menu options, keyed by the number the operator types."""

    CONNECTIVITY = "1"
    LIST_BUCKETS = "2"
    UPLOAD_TEXT = "3"
    UPLOAD_IMAGE = "4"
    UPLOAD_CUSTOM = "5"
    LIST_FILES = "6"
    DOWNLOAD = "7"
    FULL_DIAGNOSTICS = "8"
    EXIT = "9"


class MenuEntry(NamedTuple):
    description: str
    handler: Callable[[DiagnosticSession], OperationResult]


MENU: Dict[Command, MenuEntry] = {
    Command.CONNECTIVITY: MenuEntry("Connection & Config Test", handlers.handle_connectivity),
    Command.LIST_BUCKETS: MenuEntry("List Buckets", handlers.handle_list_buckets),
    Command.UPLOAD_TEXT: MenuEntry("Upload Test (Generated Text File)", handlers.handle_upload_text),
    Command.UPLOAD_IMAGE: MenuEntry(
        "Upload Test (Generated Image File)", handlers.handle_upload_image
    ),
    Command.UPLOAD_CUSTOM: MenuEntry(
        "Upload Test (Custom Local File)", handlers.handle_upload_custom
    ),
    Command.LIST_FILES: MenuEntry("List Files in Bucket", handlers.handle_list_files),
    Command.DOWNLOAD: MenuEntry("Download Test", handlers.handle_download),
    Command.FULL_DIAGNOSTICS: MenuEntry("Full Diagnostics", handlers.handle_full_diagnostics),
    Command.EXIT: MenuEntry("Exit", handlers.handle_exit),
}


def parse_choice(raw: Optional[str]) -> Optional[Command]:
    """Map typed input to a Command, None when it is not a menu option."""
    try:
        return Command((raw or "").strip())
    except ValueError:
        return None


def render_menu(console: DebugConsole) -> None:
    console.header(MENU_TITLE)
    console.print()
    console.print("[bold]Select an operation:[/bold]")
    for command, entry in MENU.items():
        console.print(f"[yellow]{command.value}.[/yellow] {entry.description}")


def dispatch(session: DiagnosticSession, command: Command) -> OperationResult:
    """Run one command's handler, containing anything it lets escape."""
    entry = MENU[command]
    try:
        return entry.handler(session)
    except Exception as e:
        logger.exception(f"Handler for '{entry.description}' failed")
        session.console.error(f"Unexpected error in '{entry.description}': {e}")
        return OperationResult.failure(ErrorKind.UNEXPECTED, str(e))
