import pytest

from nutstool.errors import HomeDirectoryUnavailable, ToolEnvironmentError, ToolIOError
from nutstool.services import tool_home as tool_home_module
from nutstool.services.tool_home import ToolHomeService


class DummyLogger:
    def __init__(self):
        self.debug_messages = []

    def debug(self, message, *args, **_kwargs):
        self.debug_messages.append(message % args)

    def warning(self, *_args, **_kwargs):
        return None


def test_resolve_creates_tool_dir_below_home(tmp_path):
    service = ToolHomeService(DummyLogger(), home_lookup=lambda: str(tmp_path))

    tool_dir = service.resolve()

    assert tool_dir == tmp_path / ".nuts"
    assert tool_dir.is_dir()


def test_resolve_is_idempotent_and_creates_once(tmp_path):
    logger = DummyLogger()
    service = ToolHomeService(logger, home_lookup=lambda: str(tmp_path))

    first = service.resolve()
    second = service.resolve()

    assert first == second
    creations = [message for message in logger.debug_messages if message.startswith("creating")]
    assert len(creations) == 1


def test_resolve_fails_without_home_and_creates_nothing(tmp_path):
    service = ToolHomeService(DummyLogger(), home_lookup=lambda: None)

    with pytest.raises(HomeDirectoryUnavailable, match="home directory") as excinfo:
        service.resolve()

    assert isinstance(excinfo.value, ToolEnvironmentError)
    assert list(tmp_path.iterdir()) == []


def test_resolve_reports_collision_with_regular_file(tmp_path):
    (tmp_path / ".nuts").write_text("not a directory", encoding="utf-8")
    service = ToolHomeService(DummyLogger(), home_lookup=lambda: str(tmp_path))

    with pytest.raises(ToolIOError, match="Could not create tool dir") as excinfo:
        service.resolve()

    assert isinstance(excinfo.value.__cause__, OSError)


def test_default_home_lookup_uses_home_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))

    assert tool_home_module.default_home_lookup() == str(tmp_path)
    assert ToolHomeService(DummyLogger()).tool_dir_path() == tmp_path / ".nuts"
