"""CLI interface for debugging Supabase Storage."""

import logging
from typing import Callable, Optional

import click
from rich.console import Console
from rich.markup import escape

from ..core.config import load_env_file
from ..core.console import DebugConsole
from ..core.operations import (
    check_connectivity,
    download_file,
    list_buckets,
    list_files,
    run_full_diagnostics,
    upload_generated_file,
    upload_local_file,
)
from ..core.payloads import DEFAULT_TEMP_DIR, PAYLOAD_KINDS
from ..core.session import DiagnosticSession, initialize_session
from .menu import Command, dispatch, parse_choice, render_menu

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

# supabase-py logs every HTTP request through httpx at INFO
HTTP_LOGGERS = ("httpx",)

# Rich console for pretty output
console = Console()

SETUP_FAILED_MESSAGE = (
    "Setup failed. Cannot proceed. Please check your .env file and Supabase project status."
)


def _report_fatal(error: BaseException) -> None:
    logger.debug("Unhandled exception", exc_info=error)
    console.print("[bold white on red]FATAL UNHANDLED EXCEPTION:[/bold white on red]")
    console.print(f"[red]{escape(repr(error))}[/red]")


def _open_session(ctx: click.Context) -> Optional[DiagnosticSession]:
    """Load the environment and build the session, reporting setup failure."""
    load_env_file(ctx.obj["env_file"])
    debug_console = ctx.obj["console"]
    session = initialize_session(debug_console, temp_dir=ctx.obj["temp_dir"])
    if session is None:
        debug_console.error(SETUP_FAILED_MESSAGE)
    return session


def _press_enter(session: DiagnosticSession) -> None:
    session.console.print()
    session.ask("[dim]Press Enter to return to menu...[/dim]")


def run_menu_loop(session: DiagnosticSession) -> None:
    """Show the menu and run one command per iteration until Exit."""
    while True:
        session.console.clear()
        render_menu(session.console)
        session.console.print()
        command = parse_choice(session.ask("Your choice:"))

        if command is None:
            session.console.warn("Invalid selection. Try again.")
            _press_enter(session)
            continue

        dispatch(session, command)
        if command is Command.EXIT:
            break
        _press_enter(session)


def _run_once(ctx: click.Context, action: Callable[[DiagnosticSession], object]) -> None:
    """Build a session, run one operation, close the session."""
    try:
        session = _open_session(ctx)
        if session is None:
            return
        try:
            action(session)
        finally:
            session.close()
    except KeyboardInterrupt:
        console.print("\nGoodbye!")
    except Exception as e:
        _report_fatal(e)


@click.group(invoke_without_command=True)
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a .env file (default: ./.env if present)",
)
@click.option(
    "--temp-dir",
    default=DEFAULT_TEMP_DIR,
    show_default=True,
    help="Directory for generated payloads and downloaded copies",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, env_file, temp_dir, verbose):
    """Supabase Storage Debug Tool - probe buckets, uploads, downloads and CORS.

    Runs the interactive menu when no command is given.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file
    ctx.obj["temp_dir"] = temp_dir
    ctx.obj.setdefault("console", DebugConsole(console))

    if ctx.invoked_subcommand is None:
        ctx.invoke(interactive)


@cli.command()
@click.pass_context
def interactive(ctx):
    """Interactive menu (the default)."""
    debug_console = ctx.obj["console"]
    session = None
    try:
        debug_console.clear()
        debug_console.header("🚀 Supabase Storage Debug Tool Initializing...")
        session = _open_session(ctx)
        if session is None:
            return
        run_menu_loop(session)
    except (KeyboardInterrupt, EOFError):
        console.print("\nGoodbye!")
    except Exception as e:
        _report_fatal(e)
    finally:
        if session is not None:
            session.close()


@cli.command()
@click.pass_context
def check(ctx):
    """Connection & configuration test."""
    _run_once(ctx, check_connectivity)


@cli.command()
@click.pass_context
def buckets(ctx):
    """List all buckets."""
    _run_once(ctx, list_buckets)


@cli.command()
@click.argument("bucket")
@click.option("--prefix", default="", help="Folder path inside the bucket")
@click.pass_context
def files(ctx, bucket, prefix):
    """List the first page of files in BUCKET."""
    _run_once(ctx, lambda session: list_files(session, bucket, prefix))


@cli.command()
@click.argument("local_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("bucket")
@click.option("--path", "remote_path", help="Destination path (default: supabase-debug-tool/custom/<name>)")
@click.option("--content-type", help="MIME type (default: guessed from extension)")
@click.pass_context
def upload(ctx, local_path, bucket, remote_path, content_type):
    """Upload LOCAL_PATH to BUCKET and probe its public URL."""
    _run_once(
        ctx,
        lambda session: upload_local_file(session, local_path, bucket, content_type, remote_path),
    )


@cli.command("upload-test")
@click.argument("bucket")
@click.option(
    "--kind",
    type=click.Choice(PAYLOAD_KINDS, case_sensitive=False),
    default="text",
    show_default=True,
    help="Generated payload type",
)
@click.option("--path", "remote_path", help="Destination path")
@click.pass_context
def upload_test(ctx, bucket, kind, remote_path):
    """Upload a generated throwaway file to BUCKET."""
    _run_once(
        ctx,
        lambda session: upload_generated_file(session, bucket, kind.lower(), remote_path),
    )


@cli.command()
@click.argument("bucket")
@click.argument("remote_path")
@click.pass_context
def download(ctx, bucket, remote_path):
    """Download REMOTE_PATH from BUCKET and probe its public URL."""
    _run_once(ctx, lambda session: download_file(session, bucket, remote_path))


@cli.command()
@click.pass_context
def diagnose(ctx):
    """Full diagnostics, including an upload/download/delete round trip."""
    _run_once(ctx, run_full_diagnostics)


def main():
    """Main entry point."""
    cli()
