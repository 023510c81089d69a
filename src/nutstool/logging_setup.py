"""Process-wide logging configuration for nuts-tool."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from nutstool.constants import TRACE_LEVEL
from nutstool.errors import ToolIOError

logging.addLevelName(TRACE_LEVEL, "TRACE")

LOGGER_NAME = "nutstool"


@dataclass(frozen=True)
class LoggingConfig:
    """Verbosity count from ``-v`` flags plus an optional log file."""

    verbosity: int = 0
    log_file: Optional[str] = None

    @property
    def level(self) -> int:
        if self.verbosity <= 0:
            return logging.INFO
        if self.verbosity == 1:
            return logging.DEBUG
        return TRACE_LEVEL


class LoggingConfigurator:
    """Applies a :class:`LoggingConfig` once; later calls are ignored."""

    def __init__(self, logger_name: str = LOGGER_NAME):
        self.logger_name = logger_name
        self.applied: Optional[LoggingConfig] = None

    @property
    def configured(self) -> bool:
        return self.applied is not None

    def configure(self, config: LoggingConfig) -> bool:
        if self.configured:
            return False

        handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_level=False,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        handlers: List[logging.Handler] = [handler]

        if config.log_file:
            try:
                file_handler = logging.FileHandler(config.log_file)
            except OSError as exc:
                raise ToolIOError(f"Could not open log file {config.log_file}: {exc}") from exc
            file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
            handlers.append(file_handler)

        logger = logging.getLogger(self.logger_name)
        logger.setLevel(config.level)
        logger.propagate = False
        for item in handlers:
            item.setLevel(config.level)
            logger.addHandler(item)

        self.applied = config
        logger.log(TRACE_LEVEL, "logging configured at level %s", logging.getLevelName(config.level))
        return True


_configurator = LoggingConfigurator()


def configure_logging(config: LoggingConfig) -> bool:
    return _configurator.configure(config)
