"""Filesystem helpers for nuts-tool."""

import logging
import os
import shutil
import sys
from pathlib import Path

from nutstool.constants import DIR_MODE
from nutstool.errors import ToolIOError


class FileSystemService:
    """Encapsulates directory side effects of the tool home and registry."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def ensure_dir(self, path: Path, label: str) -> Path:
        """Create *path* (one level) unless it already is a directory."""
        if path.is_dir():
            return path

        self.logger.debug("creating %s %s", label, path)
        try:
            path.mkdir(mode=DIR_MODE)
        except OSError as exc:
            raise ToolIOError(f"Could not create {label} {path}: {exc}") from exc

        self.set_permissions(path, DIR_MODE)
        return path

    def set_permissions(self, path: Path, mode: int):
        if sys.platform == "win32":
            return

        try:
            os.chmod(path, mode)
        except OSError as exc:
            self.logger.warning("Could not set permissions on %s: %s", path, exc)

    def list_dirs(self, path: Path):
        try:
            return sorted(child.name for child in path.iterdir() if child.is_dir())
        except OSError as exc:
            raise ToolIOError(f"Could not read directory {path}: {exc}") from exc

    def remove_tree(self, path: Path):
        if not path.exists():
            return

        try:
            shutil.rmtree(path)
        except OSError as exc:
            raise ToolIOError(f"Could not remove {path}: {exc}") from exc
        self.logger.debug("Removed directory: %s", path)
