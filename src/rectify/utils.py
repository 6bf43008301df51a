"""
Utility functions for rectify.

Contains helpers for conversion lookup, status lines and time formatting.
"""

from pathlib import Path
from typing import List, Optional

import click

from rectify.config import CONVERSIONS, Conversion

STATUS_COLORS = {
    "processing": "bright_yellow",
    "uploaded": "bright_blue",
    "folder": "bright_cyan",
    "skipped": "yellow",
    "failed": "red",
}

STATUS_LABELS = {
    "processing": "RECTIFY -->",
    "uploaded": "UPLOAD",
    "folder": "FOLDER",
    "skipped": "SKIP",
    "failed": "ERROR",
}


def conversion_for(path: Path) -> Optional[Conversion]:
    """
    Look up the conversion for a file by its lowercase extension.

    Used both to decide whether a file is converted and to pick the content
    types, so 'REPORT.DOCX' converts just like 'report.docx'. The earlier
    rectify script compared extensions case-sensitively when deciding and
    left upper-case office files unconverted.

    Args:
        path: Local file path.

    Returns:
        Matching Conversion, or None when the file is uploaded as-is.
    """
    return CONVERSIONS.get(path.suffix.lower())


def display_status(status: str, message: str) -> None:
    """
    Print a colored status line.

    Failures go to stderr, everything else to stdout.

    Args:
        status: One of the STATUS_COLORS keys.
        message: Text following the status label.
    """
    label = STATUS_LABELS.get(status, status.upper())
    click.echo(
        click.style(f"{label} {message}", fg=STATUS_COLORS.get(status)),
        err=status == "failed",
    )


def format_elapsed(elapsed: float) -> str:
    """
    Format a duration in seconds as e.g. '1h 2m 3.40s'.

    Args:
        elapsed: Duration in seconds.

    Returns:
        Human readable duration.
    """
    days = int(elapsed // 86400)
    hours = int((elapsed % 86400) // 3600)
    minutes = int((elapsed % 3600) // 60)
    seconds = elapsed % 60

    time_parts: List[str] = []
    if days > 0:
        time_parts.append(f"{days}d")
    if hours > 0 or days > 0:
        time_parts.append(f"{hours}h")
    if minutes > 0 or hours > 0 or days > 0:
        time_parts.append(f"{minutes}m")
    time_parts.append(f"{seconds:.2f}s")

    return " ".join(time_parts)
