"""
Remote storage subpackage for rectify.

Re-exports the Google Drive client.
"""

from rectify.remote.drive import DriveClient, build_drive_client

__all__ = [
    "DriveClient",
    "build_drive_client",
]
