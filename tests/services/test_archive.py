import pytest

from nutstool.errors import ArchiveError, ContainerError
from nutstool.services.archive import INDEX_BLOCK, ArchiveService
from nutstool.services.container import Container, DirectoryBackendOptions


class DummyLogger:
    def info(self, *_args, **_kwargs):
        return None

    def debug(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


@pytest.fixture
def container(tmp_path):
    return Container.create(
        DirectoryBackendOptions(tmp_path / "vault"),
        kdf_iterations=1000,
        password_callback=lambda: b"secret",
    )


def test_archive_stores_and_returns_entries(container):
    service = ArchiveService(DummyLogger())
    service.create(container)

    service.add(container, "docs/readme.txt", b"read me")
    service.add(container, "data.bin", b"\x00\x01\x02")

    entries = service.list_entries(container)
    assert [entry.name for entry in entries] == ["docs/readme.txt", "data.bin"]
    assert entries[0].size == 7
    assert service.get(container, "docs/readme.txt") == b"read me"
    assert service.info(container) == {"entries": 2, "total_size": 10}


def test_archive_survives_reopening_the_container(container):
    service = ArchiveService(DummyLogger())
    service.create(container)
    service.add(container, "note.txt", b"persisted")

    reopened = Container.open(DirectoryBackendOptions(container.path), password_callback=lambda: b"secret")

    assert service.get(reopened, "note.txt") == b"persisted"


def test_archive_requires_create_first(container):
    service = ArchiveService(DummyLogger())

    with pytest.raises(ArchiveError, match="no archive"):
        service.list_entries(container)


def test_archive_cannot_be_created_twice(container):
    service = ArchiveService(DummyLogger())
    service.create(container)

    with pytest.raises(ArchiveError, match="already holds an archive"):
        service.create(container)


def test_archive_rejects_duplicate_entry_names(container):
    service = ArchiveService(DummyLogger())
    service.create(container)
    service.add(container, "note.txt", b"one")

    with pytest.raises(ArchiveError, match="already contains"):
        service.add(container, "./note.txt", b"two")


@pytest.mark.parametrize("name", ["../escape.txt", "/etc/passwd", "a/../../b", "", "./"])
def test_archive_rejects_unsafe_entry_names(container, name):
    service = ArchiveService(DummyLogger())
    service.create(container)

    with pytest.raises(ArchiveError, match="Unsafe archive entry name"):
        service.add(container, name, b"x")


def test_archive_normalizes_windows_separators(container):
    service = ArchiveService(DummyLogger())
    service.create(container)

    entry = service.add(container, "dir\\file.txt", b"x")

    assert entry.name == "dir/file.txt"


def test_archive_get_unknown_entry(container):
    service = ArchiveService(DummyLogger())
    service.create(container)

    with pytest.raises(ArchiveError, match="No archive entry named"):
        service.get(container, "missing.txt")


def test_archive_add_removes_entry_block_when_index_write_fails(container, monkeypatch):
    service = ArchiveService(DummyLogger())
    service.create(container)
    original_write = container.write

    def failing_write(block_id, data):
        if block_id == INDEX_BLOCK:
            raise ContainerError("disk full")
        original_write(block_id, data)

    monkeypatch.setattr(container, "write", failing_write)

    with pytest.raises(ContainerError, match="disk full"):
        service.add(container, "note.txt", b"lost")

    assert not [block_id for block_id in container.block_ids() if block_id.startswith("entry-")]
    assert service.list_entries(container) == []
