"""Named container registry for nuts-tool."""

import os
from pathlib import Path
from typing import List

from nutstool.constants import REGISTRY_DIR_NAME
from nutstool.errors import ContainerNameError
from nutstool.errors_catalog import actionable_error
from nutstool.services.tool_home import ToolHomeService


class ContainerRegistry:
    """Maps container names to directories below ``~/.nuts/container.d``.

    The registry only decides *where* a container lives. Whether a container
    exists there is up to the container itself, so :meth:`container_dir`
    never creates the per-container directory.
    """

    def __init__(self, tool_home_service: ToolHomeService, logger):
        self.tool_home_service = tool_home_service
        self.filesystem_service = tool_home_service.filesystem_service
        self.logger = logger

    def validate_name(self, name: str) -> str:
        separators = {"/", os.sep}
        if os.altsep:
            separators.add(os.altsep)

        if (
            not name
            or name in (".", "..")
            or name.startswith(".")
            or "\x00" in name
            or any(sep in name for sep in separators)
        ):
            raise ContainerNameError(actionable_error("invalid_container_name", name=name))
        return name

    def registry_root(self) -> Path:
        root = self.tool_home_service.resolve() / REGISTRY_DIR_NAME
        self.logger.debug("container_dir: %s", root)
        return self.filesystem_service.ensure_dir(root, "container dir")

    def container_dir(self, name: str) -> Path:
        self.validate_name(name)
        path = self.registry_root() / name
        self.logger.debug("container_dir for %s: %s", name, path)
        return path

    def list_names(self) -> List[str]:
        return self.filesystem_service.list_dirs(self.registry_root())
