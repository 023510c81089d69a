"""Archive of named entries stored on top of an opened container."""

import json
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Dict, List

from nutstool.errors import ArchiveError, NutsError
from nutstool.errors_catalog import actionable_error
from nutstool.models import ArchiveEntry
from nutstool.services.container import Container

INDEX_BLOCK = "archive.index"
INDEX_REVISION = 1


class ArchiveService:
    """Keeps a JSON index block plus one block per archive entry."""

    def __init__(self, logger):
        self.logger = logger

    def normalize_name(self, name: str) -> str:
        normalized = name.replace("\\", "/").strip()
        path = PurePosixPath(normalized)
        parts = [part for part in path.parts if part not in ("", ".")]

        if not parts or path.is_absolute() or ".." in parts:
            raise ArchiveError(
                f"Unsafe archive entry name: `{name}`. "
                "Entry names must be relative and must not contain `..` segments."
            )
        return "/".join(parts)

    def exists(self, container: Container) -> bool:
        return container.exists(INDEX_BLOCK)

    def create(self, container: Container):
        if self.exists(container):
            raise ArchiveError(f"The container at {container.path} already holds an archive.")

        self._write_index(container, [])
        self.logger.info("Archive created in %s", container.path)

    def list_entries(self, container: Container) -> List[ArchiveEntry]:
        if not self.exists(container):
            raise ArchiveError(actionable_error("archive_missing", name=container.path.name))

        try:
            index = json.loads(container.read(INDEX_BLOCK).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ArchiveError(f"Corrupt archive index in {container.path}: {exc}") from exc

        if not isinstance(index, dict) or index.get("revision") != INDEX_REVISION:
            raise ArchiveError(f"Unsupported archive index in {container.path}.")

        try:
            return [ArchiveEntry(**item) for item in index.get("entries", [])]
        except TypeError as exc:
            raise ArchiveError(f"Corrupt archive index in {container.path}: {exc}") from exc

    def add(self, container: Container, name: str, data: bytes) -> ArchiveEntry:
        entries = self.list_entries(container)
        entry_name = self.normalize_name(name)

        if any(entry.name == entry_name for entry in entries):
            raise ArchiveError(f"The archive already contains an entry named `{entry_name}`.")

        entry = ArchiveEntry(
            name=entry_name,
            size=len(data),
            block_id=f"entry-{uuid.uuid4().hex}",
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        container.write(entry.block_id, data)
        entries.append(entry)
        try:
            self._write_index(container, entries)
        except NutsError:
            try:
                container.delete(entry.block_id)
            except NutsError as exc:
                self.logger.warning("Could not remove orphaned block %s: %s", entry.block_id, exc)
            raise

        self.logger.debug("Added archive entry %s (%d bytes)", entry.name, entry.size)
        return entry

    def get(self, container: Container, name: str) -> bytes:
        entry_name = self.normalize_name(name)
        for entry in self.list_entries(container):
            if entry.name == entry_name:
                return container.read(entry.block_id)

        raise ArchiveError(f"No archive entry named `{entry_name}`.")

    def info(self, container: Container) -> Dict[str, Any]:
        entries = self.list_entries(container)
        return {
            "entries": len(entries),
            "total_size": sum(entry.size for entry in entries),
        }

    def _write_index(self, container: Container, entries: List[ArchiveEntry]):
        index = {
            "revision": INDEX_REVISION,
            "entries": [asdict(entry) for entry in entries],
        }
        container.write(INDEX_BLOCK, json.dumps(index, sort_keys=True).encode("utf-8"))
