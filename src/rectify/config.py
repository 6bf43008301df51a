"""
Configuration constants and credentials lookup for rectify.

rectify has no configuration file of its own; the only external input besides
the prompt answers is the Google credentials JSON file.
"""

import sys
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

import click

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

# Upper bound on uploads in flight across the whole tree
MAX_CONCURRENT_UPLOADS = 4

CREDENTIALS_FILENAME = "rectifyCredentials.json"


class Conversion(NamedTuple):
    """Content types declared when uploading a convertible office file."""

    source_mime_type: str
    target_mime_type: str


CONVERSIONS: Dict[str, Conversion] = {
    ".docx": Conversion(
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.google-apps.document",
    ),
    ".xlsx": Conversion(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.google-apps.spreadsheet",
    ),
}


def global_credentials_locations() -> List[Path]:
    """Per-user locations checked after the project directories."""
    return [
        Path.home() / ".rectify" / "credentials.json",
        Path.home() / ".config" / "rectify" / "credentials.json",
    ]


def find_credentials_file(explicit: Optional[Path] = None) -> Path:
    """
    Locate the Google credentials file.

    Search order:
    1. The explicitly given path (``--credentials``), which must exist.
    2. rectifyCredentials.json in the current directory or any parent
       (nearest wins).
    3. ~/.rectify/credentials.json, then ~/.config/rectify/credentials.json.

    Args:
        explicit: Path given on the command line, if any.

    Returns:
        Path to an existing credentials file.

    Raises:
        SystemExit: If no credentials file is found.
    """
    if explicit is not None:
        explicit = explicit.expanduser()
        if not explicit.is_file():
            click.echo(
                click.style(
                    f"Error: Credentials file '{explicit}' does not exist.", fg="red"
                ),
                err=True,
            )
            sys.exit(1)
        return explicit

    searched: List[Path] = []
    current_dir = Path.cwd()

    while True:
        candidate = current_dir / CREDENTIALS_FILENAME
        searched.append(candidate)
        if candidate.is_file():
            return candidate

        parent = current_dir.parent
        if parent == current_dir:
            # Reached filesystem root
            break
        current_dir = parent

    for loc in global_credentials_locations():
        searched.append(loc)
        if loc.is_file():
            return loc

    click.echo(
        click.style(
            f"Error: Credentials file not found. Checked: {', '.join(str(p) for p in searched)}",
            fg="red",
        ),
        err=True,
    )
    sys.exit(1)
