"""
CLI entry point for rectify.

Provides the command-line interface using Click.
"""

import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Callable, Optional

import click

from rectify import __version__
from rectify.config import MAX_CONCURRENT_UPLOADS, find_credentials_file
from rectify.mirror import MirrorError, mirror_directory
from rectify.remote.drive import build_drive_client
from rectify.utils import format_elapsed

logger = logging.getLogger(__name__)

# Suppress googleapiclient's discovery cache warnings
logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


def version_callback(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Callback to display version and exit."""
    if value and not ctx.resilient_parsing:
        click.echo(f"rectify version {__version__}")
        ctx.exit()


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _require_text(message: str) -> Callable[[str], str]:
    """Build a value processor that strips input and rejects empty values."""

    def process(value: str) -> str:
        value = value.strip()
        if not value:
            raise click.BadParameter(message)
        return value

    return process


def _ask(value: Optional[str], prompt: str, empty_message: str) -> str:
    """Validate an option value, prompting for it when it was not given."""
    process = _require_text(empty_message)
    if value is None:
        return click.prompt(prompt, value_proc=process)
    return process(value)


def display_banner() -> None:
    """Clear the terminal and print the title."""
    click.clear()
    click.echo(click.style(f"RECTIFIER {__version__}", fg="magenta", bold=True))
    click.echo(
        click.style(
            f"Local folders into Google Drive ({MAX_CONCURRENT_UPLOADS} parallel uploads)",
            fg="magenta",
        )
    )
    click.echo()


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--version",
    "-v",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option(
    "-p",
    "--path",
    "local_path",
    default=None,
    help="Local folder to upload. Prompted for when omitted.",
)
@click.option(
    "-f",
    "--folder-id",
    "folder_id",
    default=None,
    help="Google Drive folder ID to upload into. Prompted for when omitted.",
)
@click.option(
    "-c",
    "--credentials",
    "credentials",
    default=None,
    type=click.Path(path_type=Path),
    help="Google credentials JSON file (service account or authorized user).",
)
@click.option(
    "--convert/--no-convert",
    default=True,
    help="Convert .docx/.xlsx files to Google Docs/Sheets [default: enabled]",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug logging.",
)
def main(
    local_path: Optional[str],
    folder_id: Optional[str],
    credentials: Optional[Path],
    convert: bool,
    debug: bool,
) -> None:
    """
    Upload a local folder tree into a Google Drive folder.

    Every subfolder is recreated in Drive and every file is uploaded into its
    matching folder, at most four at a time. Word (.docx) and Excel (.xlsx)
    files are converted to Google Docs and Google Sheets unless --no-convert
    is given.

    \b
    Re-running against the same Drive folder uploads everything again;
    existing folders and files are never reused or replaced.

    \b
    Credentials:
      The credentials file is looked up in this order:
        1. --credentials option
        2. rectifyCredentials.json in the current directory or any parent
        3. ~/.rectify/credentials.json
        4. ~/.config/rectify/credentials.json

    \b
    Examples:
      rectify                                   # Prompt for folder and Drive ID
      rectify -p ./reports -f 1AbCdEfGhIj       # No prompts
      rectify -p ./reports -f 1AbC --no-convert # Keep office files as-is
    """
    _setup_logging(debug)
    display_banner()

    credentials_file = find_credentials_file(credentials)
    logger.debug("Using credentials file %s", credentials_file)

    try:
        client = build_drive_client(credentials_file)
    except Exception as e:
        click.echo(
            click.style(f"Error: Could not authenticate with Google Drive: {e}", fg="red"),
            err=True,
        )
        sys.exit(1)

    local_path = _ask(
        local_path,
        "Enter the path to the folder you want to upload",
        "Path cannot be empty.",
    )
    folder_id = _ask(
        folder_id,
        "Enter the Google Drive folder ID to upload into",
        "Folder ID cannot be empty.",
    )

    start_time = time.time()

    try:
        stats = asyncio.run(
            mirror_directory(client, Path(local_path).expanduser(), folder_id, convert)
        )
    except MirrorError as e:
        click.echo(click.style(f"Upload process failed: {e}", fg="bright_red"), err=True)
        for path, error in e.failures[1:]:
            click.echo(click.style(f"  {path}: {error}", fg="red"), err=True)
        sys.exit(1)
    except Exception as e:
        logger.debug("Mirror aborted", exc_info=True)
        click.echo(click.style(f"Upload process failed: {e}", fg="bright_red"), err=True)
        sys.exit(1)

    click.echo()
    click.echo(click.style("All files [RECTIFIED, GAMED, UPLOADED].", fg="bright_green"))
    click.echo(
        f"📁 {stats.folders_created} folders created, "
        f"⬆️  {stats.files_uploaded} files uploaded, "
        f"❌ {stats.files_failed} failed, "
        f"⏭️  {stats.entries_skipped} skipped"
    )
    click.echo(f"⏱️  Upload completed in {format_elapsed(time.time() - start_time)}")
    click.echo(click.style("END OF LINE", fg="bright_green"))


if __name__ == "__main__":
    main()
