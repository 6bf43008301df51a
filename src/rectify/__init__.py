"""
rectify - Mirror local folders into Google Drive

Uploads a local directory tree into a Drive folder, recreating its folder
structure and converting Word/Excel files to Google Docs/Sheets.
"""

__version__ = "1.0.0"

# Public API exports
from rectify.config import find_credentials_file
from rectify.mirror import MirrorError, MirrorStats, TreeMirror, mirror_directory
from rectify.remote.drive import DriveClient, build_drive_client

__all__ = [
    "__version__",
    "find_credentials_file",
    "MirrorError",
    "MirrorStats",
    "TreeMirror",
    "mirror_directory",
    "DriveClient",
    "build_drive_client",
]
