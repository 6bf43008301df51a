"""
Shared pytest fixtures for rectify tests.
"""

import asyncio
import itertools
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional, Set, Tuple
from unittest.mock import patch

import pytest


class FakeDrive:
    """In-memory stand-in for DriveClient that records every call."""

    def __init__(self, upload_delay: float = 0.01) -> None:
        self.upload_delay = upload_delay
        self.folders: List[Tuple[str, Dict[str, Any]]] = []
        self.uploads: List[Tuple[str, Dict[str, Any], Path, Optional[str]]] = []
        self.fail_uploads: Set[str] = set()
        self.fail_folders: Set[str] = set()
        self.in_flight = 0
        self.max_in_flight = 0
        self._ids = itertools.count(1)

    @property
    def calls(self) -> int:
        return len(self.folders) + len(self.uploads)

    async def create_folder(self, metadata: Dict[str, Any]) -> str:
        await asyncio.sleep(0)
        if metadata["name"] in self.fail_folders:
            raise RuntimeError(f"cannot create {metadata['name']}")
        folder_id = f"folder-{next(self._ids)}"
        self.folders.append((folder_id, metadata))
        return folder_id

    async def upload_file(
        self,
        metadata: Dict[str, Any],
        path: Path,
        mimetype: Optional[str] = None,
    ) -> str:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.upload_delay)
            if metadata["name"] in self.fail_uploads:
                raise ConnectionError("simulated network error")
            file_id = f"file-{next(self._ids)}"
            self.uploads.append((file_id, metadata, path, mimetype))
            return file_id
        finally:
            self.in_flight -= 1

    def folder_id_for(self, name: str) -> str:
        matches = [fid for fid, meta in self.folders if meta["name"] == name]
        assert len(matches) == 1, f"expected one folder named {name}, got {matches}"
        return matches[0]

    def upload_for(self, name: str) -> Tuple[str, Dict[str, Any], Path, Optional[str]]:
        matches = [u for u in self.uploads if u[1]["name"] == name]
        assert len(matches) == 1, f"expected one upload named {name}"
        return matches[0]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_drive() -> FakeDrive:
    """Fake Drive client recording folder and upload calls."""
    return FakeDrive()


@pytest.fixture
def sample_tree(temp_dir: Path) -> Path:
    """
    Create a sample directory tree.

    root/
      a.docx, b.xlsx, c.txt
      reports/
        q1.xlsx, notes.md
        archive/
          old.txt
      empty/
    """
    root = temp_dir / "root"
    (root / "reports" / "archive").mkdir(parents=True)
    (root / "empty").mkdir()

    (root / "a.docx").write_bytes(b"PK\x03\x04docx")
    (root / "b.xlsx").write_bytes(b"PK\x03\x04xlsx")
    (root / "c.txt").write_text("plain text")
    (root / "reports" / "q1.xlsx").write_bytes(b"PK\x03\x04q1")
    (root / "reports" / "notes.md").write_text("# notes")
    (root / "reports" / "archive" / "old.txt").write_text("old")

    return root


@pytest.fixture
def unlistable_reports(sample_tree: Path) -> Generator[Path, None, None]:
    """Make listing sample_tree/reports fail with PermissionError."""
    real_listdir = os.listdir
    reports = sample_tree / "reports"

    def listdir(path: Any) -> List[str]:
        if Path(path) == reports:
            raise PermissionError(13, "Permission denied", str(path))
        return real_listdir(path)

    with patch("rectify.mirror.os.listdir", side_effect=listdir):
        yield reports
