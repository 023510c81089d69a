"""Tool home directory resolution for nuts-tool."""

import os
from pathlib import Path
from typing import Callable, Optional

from nutstool.constants import TOOL_DIR_NAME
from nutstool.errors import HomeDirectoryUnavailable
from nutstool.errors_catalog import actionable_error
from nutstool.services.filesystem import FileSystemService


def default_home_lookup() -> Optional[str]:
    home = os.path.expanduser("~")
    if not home or home.startswith("~"):
        return None
    return home


class ToolHomeService:
    """Locates and lazily creates ``~/.nuts``."""

    def __init__(
        self,
        logger,
        filesystem_service: Optional[FileSystemService] = None,
        home_lookup: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.logger = logger
        self.filesystem_service = filesystem_service or FileSystemService(logger)
        self.home_lookup = home_lookup or default_home_lookup

    def tool_dir_path(self) -> Path:
        """Return the tool home path without touching the filesystem."""
        home = self.home_lookup()
        if not home:
            raise HomeDirectoryUnavailable(actionable_error("home_unavailable"))
        return Path(home) / TOOL_DIR_NAME

    def resolve(self) -> Path:
        tool_dir = self.tool_dir_path()
        self.logger.debug("tool_dir: %s", tool_dir)
        return self.filesystem_service.ensure_dir(tool_dir, "tool dir")
