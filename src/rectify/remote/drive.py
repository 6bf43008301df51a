"""
Google Drive client for rectify.

Wraps the Drive v3 API in the two coroutines the mirror needs: folder creation
and file upload. Blocking API calls run in worker threads.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import google.auth
import google_auth_httplib2
import httplib2
from googleapiclient.discovery import build
from googleapiclient.http import MediaFileUpload

from rectify.config import DRIVE_SCOPES

logger = logging.getLogger(__name__)


class DriveClient:
    """Authenticated Drive v3 client exposing async create calls."""

    def __init__(self, credentials: Any, service: Any = None):
        self.credentials = credentials
        self.service = service or build(
            "drive", "v3", credentials=credentials, cache_discovery=False
        )

    def _authorized_http(self) -> google_auth_httplib2.AuthorizedHttp:
        """Fresh transport per request; httplib2.Http is not thread-safe."""
        return google_auth_httplib2.AuthorizedHttp(
            self.credentials, http=httplib2.Http()
        )

    async def create_folder(self, metadata: Dict[str, Any]) -> str:
        """
        Create a Drive node without content (used for folders).

        Args:
            metadata: Drive file resource (name, mimeType, parents).

        Returns:
            Id assigned by Drive.
        """
        request = self.service.files().create(body=metadata, fields="id")
        response = await asyncio.to_thread(
            request.execute, http=self._authorized_http()
        )
        logger.debug("Created %s -> %s", metadata.get("name"), response["id"])
        return response["id"]

    async def upload_file(
        self,
        metadata: Dict[str, Any],
        path: Path,
        mimetype: Optional[str] = None,
    ) -> str:
        """
        Upload a local file as a new Drive file.

        The body is streamed from disk in a single request (chunksize=-1).

        Args:
            metadata: Drive file resource (name, parents, optional mimeType).
            path: Local file to upload.
            mimetype: Content type of the uploaded bytes. None lets the
                library guess from the file name.

        Returns:
            Id assigned by Drive.
        """
        media = MediaFileUpload(
            str(path), mimetype=mimetype, chunksize=-1, resumable=True
        )
        try:
            request = self.service.files().create(
                body=metadata, media_body=media, fields="id"
            )
            response = await asyncio.to_thread(
                request.execute, http=self._authorized_http()
            )
        finally:
            media.stream().close()
        logger.debug("Uploaded %s -> %s", path, response["id"])
        return response["id"]


def build_drive_client(credentials_file: Path) -> DriveClient:
    """
    Load credentials and build a Drive client.

    Accepts service account keys and authorized user files.

    Args:
        credentials_file: Path to the credentials JSON file.

    Returns:
        Ready to use DriveClient.

    Raises:
        google.auth.exceptions.DefaultCredentialsError: If the file is missing
            or not a supported credentials file.
    """
    credentials, _ = google.auth.load_credentials_from_file(
        str(credentials_file), scopes=DRIVE_SCOPES
    )
    logger.debug("Loaded credentials from %s", credentials_file)
    return DriveClient(credentials)
