"""
File System Corpus Implementation

Reads a plain directory of journal notes (an Obsidian-style vault):

    <base_dir>/
        journals/
            2024-03-09.md
            2024-03-10.md
            ideas.md

Corpus paths are POSIX paths relative to base_dir ("journals/2024-03-10.md").

TRADEOFFS:
- Blocking file I/O runs in worker threads (asyncio.to_thread)
- No change notifications; callers rely on the record cache TTL
"""

import asyncio
from pathlib import Path, PurePosixPath
from typing import Optional

from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from daybook.services.corpus.interface import (
    CorpusError,
    DocumentHandle,
    DocumentReadError,
    DocumentWriteError,
    WritableCorpusInterface,
)


def _is_transient(error: BaseException) -> bool:
    """OS errors worth retrying (not missing files or permissions)."""
    if not isinstance(error, OSError):
        return False
    return not isinstance(
        error, (FileNotFoundError, IsADirectoryError, NotADirectoryError, PermissionError)
    )


class FileSystemCorpus(WritableCorpusInterface):
    """
    Journal documents stored as files under a base directory.
    """

    def __init__(
        self,
        base_dir: Path,
        extensions: Optional[list[str]] = None,
        encoding: str = "utf-8",
    ):
        self._base_dir = Path(base_dir).resolve()
        self._extensions = {e.lower() for e in (extensions or [".md"])}
        self._encoding = encoding

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _resolve(self, path: str) -> Path:
        """Map a corpus path to a file system path inside base_dir."""
        try:
            full = (self._base_dir / PurePosixPath(path.strip("/"))).resolve()
        except ValueError as e:
            raise CorpusError(f"Invalid corpus path {path!r}: {e}")
        if full != self._base_dir and self._base_dir not in full.parents:
            raise CorpusError(f"Path escapes the corpus: {path}")
        return full

    def _to_handle(self, full: Path) -> DocumentHandle:
        relative = full.relative_to(self._base_dir).as_posix()
        return DocumentHandle(identity=full.name, path=relative)

    def _walk(self, path_prefix: str) -> list[DocumentHandle]:
        root = self._resolve(path_prefix)
        if not root.exists():
            return []
        if root.is_file():
            return [self._to_handle(root)] if root.suffix.lower() in self._extensions else []

        handles = []
        for full in root.rglob("*"):
            relative_parts = full.relative_to(self._base_dir).parts
            if any(part.startswith(".") for part in relative_parts):
                continue
            if full.is_file() and full.suffix.lower() in self._extensions:
                handles.append(self._to_handle(full))
        return sorted(handles, key=lambda h: h.path)

    async def list_documents(self, path_prefix: str) -> list[DocumentHandle]:
        """List matching documents under `path_prefix`, recursively."""
        try:
            return await asyncio.to_thread(self._walk, path_prefix)
        except OSError as e:
            raise CorpusError(f"Failed to list {path_prefix}: {e}")

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    async def _read_text(self, full: Path) -> str:
        return await asyncio.to_thread(full.read_text, encoding=self._encoding)

    async def read_document(self, handle: DocumentHandle) -> str:
        """Read a document's text."""
        try:
            return await self._read_text(self._resolve(handle.path))
        except (OSError, UnicodeDecodeError, CorpusError) as e:
            raise DocumentReadError(handle.path, f"Failed to read {handle.path}: {e}")

    async def document_exists(self, path: str) -> bool:
        try:
            full = self._resolve(path)
        except CorpusError:
            return False
        return await asyncio.to_thread(full.exists)

    async def write_document(self, path: str, content: str) -> DocumentHandle:
        """Create or replace a document, creating parent folders as needed."""
        try:
            full = self._resolve(path)

            def _write() -> None:
                full.parent.mkdir(parents=True, exist_ok=True)
                full.write_text(content, encoding=self._encoding)

            await asyncio.to_thread(_write)
        except (OSError, CorpusError) as e:
            raise DocumentWriteError(f"Failed to write {path}: {e}")
        return self._to_handle(full)
