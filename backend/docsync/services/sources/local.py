from __future__ import annotations
import logging
import os
from pathlib import Path

from docsync.services.sources.base import FetchError, RemoteFile, TreeEntry, TreeSource
from docsync.utils.files import git_blob_sha, is_markdown_file

logger = logging.getLogger(__name__)


class LocalSource(TreeSource):
    """
    Documentation tree on the local filesystem.

    Paths are reported relative to base_dir, so documents get the same
    logical paths they would get from the repository. Content hashes are
    git blob SHAs, which makes a local sync and a GitHub sync of the same
    tree agree on what is unchanged.
    """

    def __init__(
        self,
        base_dir: str | Path,
        recursive: bool = True,
        max_concurrency: int = 4,
    ) -> None:
        super().__init__(root="", recursive=recursive, max_concurrency=max_concurrency)
        self.base_dir = Path(base_dir)

    def describe(self) -> str:
        return f"local:{self.base_dir}"

    def _resolve(self, path: str) -> Path:
        return self.base_dir / path if path else self.base_dir

    async def list_folder(self, path: str) -> list[TreeEntry]:
        folder = self._resolve(path)
        try:
            with os.scandir(folder) as it:
                dir_entries = sorted(it, key=lambda e: e.name)
                entries: list[TreeEntry] = []
                for item in dir_entries:
                    rel = f"{path}/{item.name}" if path else item.name
                    if item.is_dir(follow_symlinks=False):
                        entries.append(TreeEntry("dir", item.name, rel))
                    elif item.is_file():
                        content_hash = (
                            self._hash(Path(item.path)) if is_markdown_file(item.name) else None
                        )
                        entries.append(TreeEntry("file", item.name, rel, content_hash))
        except OSError as e:
            raise FetchError(f"Cannot list '{folder}': {e}") from e
        return entries

    @staticmethod
    def _hash(path: Path) -> str:
        return git_blob_sha(path.read_bytes())

    async def read_file(self, remote_file: RemoteFile) -> str:
        path = self._resolve(remote_file.remote_path)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(f"Cannot read '{path}': {e}") from e
