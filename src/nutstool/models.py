"""Shared domain models for nuts-tool."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ArchiveEntry:
    """A named entry of an archive, stored in its own container block."""

    name: str
    size: int
    block_id: str
    created_at: str


@dataclass(frozen=True)
class ContainerInfo:
    """Header summary of an opened container. Never carries key material."""

    name: str
    path: str
    revision: int
    cipher: str
    kdf: str
    kdf_iterations: Optional[int]
    created_at: Optional[str]
    blocks: int
