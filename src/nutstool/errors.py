"""Domain errors for nuts-tool."""


class NutsError(RuntimeError):
    """Base class for every error reported to the operator."""


class ToolEnvironmentError(NutsError):
    """Raised when the runtime environment cannot support the tool."""


class HomeDirectoryUnavailable(ToolEnvironmentError):
    """Raised when the operator's home directory cannot be determined."""


class ToolIOError(NutsError):
    """Raised when a tool directory cannot be created or read."""


class PromptError(NutsError):
    """Raised when the operator cannot be asked for a secret."""


class OpenError(NutsError):
    """Raised when a named container cannot be opened."""


class ContainerNameError(NutsError):
    """Raised for container names that are not a simple path segment."""


class ConfigError(NutsError):
    """Raised for unreadable or invalid configuration files."""


class ContainerError(NutsError):
    """Raised by the directory-backed container."""


class ContainerNotFoundError(ContainerError):
    pass


class ContainerExistsError(ContainerError):
    pass


class HeaderError(ContainerError):
    """Raised when the container header is corrupt or unsupported."""


class PasswordError(ContainerError):
    """Raised when the container cannot be unlocked with the given password."""


class ArchiveError(NutsError):
    """Raised for archive level failures on top of a container."""


def error_chain(exc: BaseException) -> str:
    """Render *exc* and its causes as one human readable message."""
    lines = [str(exc) or type(exc).__name__]
    seen = {id(exc)}
    cause = exc.__cause__
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        lines.append(f"  caused by: {str(cause) or type(cause).__name__}")
        cause = cause.__cause__
    return "\n".join(lines)
