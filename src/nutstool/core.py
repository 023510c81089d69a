import logging
from typing import Callable, List, Optional

from .constants import DEFAULT_CIPHER, DEFAULT_KDF_ITERATIONS
from .errors import ContainerNotFoundError, NutsError, OpenError, ToolIOError
from .errors_catalog import actionable_error
from .models import ArchiveEntry, ContainerInfo
from .services.archive import ArchiveService
from .services.container import Container, DirectoryBackend, DirectoryBackendOptions
from .services.credentials import PasswordCallback, PasswordPrompt
from .services.filesystem import FileSystemService
from .services.registry import ContainerRegistry
from .services.tool_home import ToolHomeService

logger = logging.getLogger("nutstool")

ContainerOpener = Callable[[DirectoryBackendOptions, Optional[PasswordCallback]], Container]


class NutsTool:
    """Ties the tool home, the container registry and the password prompt together."""

    def __init__(
        self,
        home_lookup: Optional[Callable[[], Optional[str]]] = None,
        password_prompt: Optional[PasswordPrompt] = None,
        container_opener: Optional[ContainerOpener] = None,
        cipher: str = DEFAULT_CIPHER,
        kdf_iterations: int = DEFAULT_KDF_ITERATIONS,
    ):
        self.cipher = cipher
        self.kdf_iterations = kdf_iterations

        self.filesystem_service = FileSystemService(logger=logger)
        self.tool_home_service = ToolHomeService(
            logger=logger,
            filesystem_service=self.filesystem_service,
            home_lookup=home_lookup,
        )
        self.registry = ContainerRegistry(self.tool_home_service, logger=logger)
        self.password_prompt = password_prompt or PasswordPrompt()
        self.container_opener = container_opener or Container.open
        self.archive_service = ArchiveService(logger=logger)

    def open_container(self, name: str) -> Container:
        """Opens the named container, asking for a password only if it needs one."""
        try:
            path = self.registry.container_dir(name)
            return self.container_opener(
                DirectoryBackendOptions(path),
                self.password_prompt.ask_for_password,
            )
        except (NutsError, OSError) as exc:
            raise OpenError(f"Could not open container '{name}'") from exc

    def create_container(
        self,
        name: str,
        cipher: Optional[str] = None,
        kdf_iterations: Optional[int] = None,
    ) -> Container:
        path = self.registry.container_dir(name)
        container = Container.create(
            DirectoryBackendOptions(path),
            cipher=cipher or self.cipher,
            kdf_iterations=kdf_iterations or self.kdf_iterations,
            password_callback=self.password_prompt.ask_for_new_password,
        )
        logger.info("Container '%s' created at %s", name, path)
        return container

    def list_containers(self) -> List[str]:
        return self.registry.list_names()

    def container_info(self, name: str) -> ContainerInfo:
        info = self.open_container(name).info()
        return ContainerInfo(name=name, **info)

    def delete_container(self, name: str):
        path = self.registry.container_dir(name)
        try:
            has_header = DirectoryBackend(DirectoryBackendOptions(path)).exists()
        except OSError as exc:
            raise ToolIOError(f"Could not inspect container directory {path}: {exc}") from exc

        if not has_header:
            raise ContainerNotFoundError(
                actionable_error("container_not_found", path=str(path), name=name)
            )

        self.filesystem_service.remove_tree(path)
        logger.info("Container '%s' deleted", name)

    def create_archive(self, name: str):
        self.archive_service.create(self.open_container(name))

    def add_archive_entry(self, name: str, entry_name: str, data: bytes) -> ArchiveEntry:
        return self.archive_service.add(self.open_container(name), entry_name, data)

    def list_archive(self, name: str) -> List[ArchiveEntry]:
        return self.archive_service.list_entries(self.open_container(name))

    def get_archive_entry(self, name: str, entry_name: str) -> bytes:
        return self.archive_service.get(self.open_container(name), entry_name)

    def archive_info(self, name: str):
        return self.archive_service.info(self.open_container(name))


def open_named_container(name: str) -> Container:
    return NutsTool().open_container(name)
