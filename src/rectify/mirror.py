"""
Directory mirroring for rectify.

Recreates a local directory tree under a Google Drive folder. Subdirectories
become Drive folders, created before anything is scheduled into them. Files
are uploaded through a shared semaphore so that at most MAX_CONCURRENT_UPLOADS
uploads are in flight across the whole tree.

Failure policy:
- A failed upload is reported and counted, and never propagates.
- A failed folder creation is reported and its subtree skipped. The rest of
  the level still runs, then a MirrorError propagates to the caller.
- A directory that cannot be listed raises immediately.
"""

import asyncio
import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from rectify.config import FOLDER_MIME_TYPE, MAX_CONCURRENT_UPLOADS
from rectify.utils import conversion_for, display_status

logger = logging.getLogger(__name__)


class RemoteStorage(Protocol):
    """The two Drive operations the mirror depends on."""

    async def create_folder(self, metadata: Dict[str, Any]) -> str:
        ...

    async def upload_file(
        self,
        metadata: Dict[str, Any],
        path: Path,
        mimetype: Optional[str] = None,
    ) -> str:
        ...


@dataclass(frozen=True)
class LocalNode:
    """A directory entry as seen during one scan."""

    path: Path
    name: str
    kind: str  # "file", "directory" or "other"


@dataclass
class MirrorStats:
    """Counters for one mirror run. Only touched from the event loop."""

    folders_created: int = 0
    files_uploaded: int = 0
    files_failed: int = 0
    entries_skipped: int = 0


class MirrorError(Exception):
    """One or more folders (and therefore their subtrees) could not be mirrored."""

    def __init__(self, failures: List[Tuple[Path, BaseException]]):
        self.failures = failures
        first_path, first_error = failures[0]
        message = f"{first_path}: {first_error}"
        if len(failures) > 1:
            message += f" (and {len(failures) - 1} more)"
        super().__init__(message)


def scan_directory(path: Path) -> Tuple[List[LocalNode], List[Tuple[Path, OSError]]]:
    """
    List the immediate entries of a directory, sorted by name.

    Symbolic links are followed. Entries that cannot be stat'ed are returned
    separately instead of aborting the scan.

    Args:
        path: Directory to list.

    Returns:
        Tuple of (nodes, unreadable) where unreadable holds (path, error) pairs.

    Raises:
        OSError: If the directory itself cannot be listed.
    """
    nodes: List[LocalNode] = []
    unreadable: List[Tuple[Path, OSError]] = []

    for name in sorted(os.listdir(path)):
        full_path = path / name
        try:
            mode = os.stat(full_path).st_mode
        except OSError as e:
            unreadable.append((full_path, e))
            continue

        if stat.S_ISDIR(mode):
            kind = "directory"
        elif stat.S_ISREG(mode):
            kind = "file"
        else:
            kind = "other"
        nodes.append(LocalNode(full_path, name, kind))

    return nodes, unreadable


async def create_folder(
    client: RemoteStorage, name: str, parent_id: Optional[str]
) -> str:
    """
    Create a Drive folder. Errors propagate to the caller.

    No lookup is done first: every call creates a new folder, even if one
    with the same name already exists under the parent.

    Args:
        client: Remote storage client.
        name: Folder display name.
        parent_id: Parent folder id, or None for the drive root.

    Returns:
        Id of the new folder.
    """
    metadata = {
        "name": name,
        "mimeType": FOLDER_MIME_TYPE,
        "parents": [parent_id] if parent_id else [],
    }
    return await client.create_folder(metadata)


async def upload_file(
    client: RemoteStorage,
    local_file: Path,
    folder_id: str,
    convert: bool,
    stats: Optional[MirrorStats] = None,
) -> Optional[str]:
    """
    Upload one file into a Drive folder, best effort.

    When convert is set and the extension has a known conversion, Drive is
    asked to store the file in its native format.

    Args:
        client: Remote storage client.
        local_file: File to upload.
        folder_id: Destination folder id.
        convert: Whether to request conversion.
        stats: Counters to update, if any.

    Returns:
        Id of the new Drive file, or None if the upload failed.
    """
    file_name = local_file.name
    display_status("processing", file_name)

    metadata: Dict[str, Any] = {"name": file_name, "parents": [folder_id]}
    mimetype: Optional[str] = None

    if convert:
        conversion = conversion_for(local_file)
        if conversion is not None:
            metadata["mimeType"] = conversion.target_mime_type
            mimetype = conversion.source_mime_type

    try:
        file_id = await client.upload_file(metadata, local_file, mimetype)
    except Exception as e:
        display_status("failed", f"Error during upload of {file_name}: {e}")
        logger.debug("Upload of %s failed", local_file, exc_info=True)
        if stats is not None:
            stats.files_failed += 1
        return None

    display_status("uploaded", file_name)
    if stats is not None:
        stats.files_uploaded += 1
    return file_id


class TreeMirror:
    """
    Mirrors local directories into Drive folders.

    One instance owns the upload gate for a run; every recursive call goes
    through the same instance so the bound holds for the whole tree.
    """

    def __init__(
        self,
        client: RemoteStorage,
        gate: Optional[asyncio.Semaphore] = None,
        convert: bool = True,
    ):
        self.client = client
        self.gate = gate or asyncio.Semaphore(MAX_CONCURRENT_UPLOADS)
        self.convert = convert
        self.stats = MirrorStats()

    async def mirror(self, local_path: Path, folder_id: str) -> None:
        """
        Mirror the contents of local_path into the Drive folder folder_id.

        Args:
            local_path: Existing local directory.
            folder_id: Destination Drive folder id.

        Raises:
            ValueError: If folder_id is empty.
            OSError: If local_path cannot be listed.
            MirrorError: If any folder below local_path could not be created.
        """
        if not folder_id:
            raise ValueError("Destination folder id cannot be empty.")

        nodes, unreadable = await asyncio.to_thread(scan_directory, local_path)

        for path, error in unreadable:
            display_status("skipped", f"{path} ({error})")
            self.stats.entries_skipped += 1

        failures: List[Tuple[Path, BaseException]] = []

        async with asyncio.TaskGroup() as group:
            for node in nodes:
                if node.kind == "directory":
                    try:
                        child_id = await create_folder(
                            self.client, node.name, folder_id
                        )
                    except Exception as e:
                        display_status(
                            "failed", f"Could not create folder {node.name}: {e}"
                        )
                        failures.append((node.path, e))
                        continue
                    self.stats.folders_created += 1
                    display_status("folder", node.name)
                    group.create_task(
                        self._mirror_subtree(node.path, child_id, failures)
                    )
                elif node.kind == "file":
                    convert = self.convert and conversion_for(node.path) is not None
                    group.create_task(self._gated_upload(node.path, folder_id, convert))
                else:
                    display_status("skipped", f"{node.path} (not a regular file)")
                    self.stats.entries_skipped += 1

        if failures:
            raise MirrorError(failures)

    async def _gated_upload(
        self, local_file: Path, folder_id: str, convert: bool
    ) -> None:
        async with self.gate:
            await upload_file(self.client, local_file, folder_id, convert, self.stats)

    async def _mirror_subtree(
        self,
        local_path: Path,
        folder_id: str,
        failures: List[Tuple[Path, BaseException]],
    ) -> None:
        # Collect instead of raising so the TaskGroup does not cancel siblings
        try:
            await self.mirror(local_path, folder_id)
        except MirrorError as e:
            failures.extend(e.failures)
        except Exception as e:
            display_status("failed", f"Could not mirror {local_path}: {e}")
            failures.append((local_path, e))


async def mirror_directory(
    client: RemoteStorage,
    local_path: Path,
    folder_id: str,
    convert: bool = True,
) -> MirrorStats:
    """
    Mirror local_path into folder_id and return the run statistics.

    The upload gate is created here, once per run.
    """
    tree = TreeMirror(
        client, gate=asyncio.Semaphore(MAX_CONCURRENT_UPLOADS), convert=convert
    )
    logger.debug("Mirroring %s into %s", local_path, folder_id)
    await tree.mirror(Path(local_path), folder_id)
    return tree.stats
