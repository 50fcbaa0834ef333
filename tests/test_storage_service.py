# =============================================================================
# tests/test_storage_service.py - File Store Tests
# =============================================================================
# Tests for core/services/storage_service.py:
# - Extension handling and generated names
# - Storing and deleting files under the upload root
# - FileTransaction commit and rollback
# =============================================================================

import re

import pytest

from app.exceptions import StorageError
from core.services.storage_service import FileStore, has_content
from tests.conftest import incoming

STORED_URL = re.compile(r"^/uploads/[0-9a-f-]{36}\.\w+$")


# =============================================================================
# Naming
# =============================================================================

class TestFileExtension:
    """Tests for FileStore.file_extension."""

    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("demo.mp4", "mp4"),
            ("archive.tar.gz", "gz"),
            ("README", "bin"),
            (None, "bin"),
            ("", "bin"),
            ("trailing.", "bin"),
            ("dir.v2/noext", "bin"),
            ("C:\\videos\\clip.MOV", "MOV"),
        ],
    )
    def test_extension(self, filename, expected):
        assert FileStore.file_extension(filename) == expected

    def test_generated_names_are_unique(self, file_store):
        names = {file_store.generate_name("a.zip") for _ in range(50)}
        assert len(names) == 50
        assert all(name.endswith(".zip") for name in names)


class TestPathFor:
    """Tests for mapping stored references to paths."""

    def test_strips_prefix(self, file_store, upload_dir):
        assert file_store.path_for("/uploads/abc.zip") == upload_dir / "abc.zip"

    def test_cannot_escape_root(self, file_store, upload_dir):
        assert file_store.path_for("/uploads/../../etc/passwd") == upload_dir / "passwd"

    def test_empty_reference_rejected(self, file_store):
        with pytest.raises(StorageError):
            file_store.path_for("/uploads/")


# =============================================================================
# Store / Delete
# =============================================================================

class TestStore:
    """Tests for FileStore.store."""

    def test_store_creates_root_and_writes_content(self, file_store, upload_dir):
        assert not upload_dir.exists()

        url = file_store.store(incoming(b"hello").stream, "demo.mp4")

        assert STORED_URL.match(url)
        assert url.endswith(".mp4")
        path = file_store.path_for(url)
        assert path.parent == upload_dir
        assert path.read_bytes() == b"hello"

    def test_store_without_extension_uses_bin(self, file_store):
        url = file_store.store(incoming(b"x").stream, None)
        assert url.endswith(".bin")

    def test_custom_prefix(self, upload_dir):
        store = FileStore(upload_dir, url_prefix="/files")
        url = store.store(incoming(b"x").stream, "a.zip")
        assert url.startswith("/files/")
        assert store.path_for(url).exists()

    def test_root_is_a_file(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("occupied")

        store = FileStore(blocker)

        with pytest.raises(StorageError) as exc_info:
            store.store(incoming(b"x").stream, "a.zip")
        assert exc_info.value.status_code == 500

    def test_root_cannot_be_created(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("occupied")

        store = FileStore(blocker / "uploads")

        with pytest.raises(StorageError):
            store.ensure_root()


class TestDelete:
    """Tests for FileStore.delete."""

    def test_delete_removes_file(self, file_store):
        url = file_store.store(incoming(b"bye").stream, "a.zip")

        file_store.delete(url)

        assert not file_store.path_for(url).exists()

    def test_delete_missing_file_is_not_an_error(self, file_store):
        file_store.delete("/uploads/never-existed.zip")

    def test_delete_directory_fails(self, file_store, upload_dir):
        (upload_dir / "subdir").mkdir(parents=True)

        with pytest.raises(StorageError):
            file_store.delete("/uploads/subdir")


def test_has_content():
    assert has_content(incoming(b"x"))
    assert not has_content(incoming(b""))
    assert not has_content(None)


# =============================================================================
# FileTransaction
# =============================================================================

class TestFileTransaction:
    """Tests for grouped file changes."""

    def test_commit_keeps_new_files_and_purges_removed(self, file_store):
        old_url = file_store.store(incoming(b"old").stream, "a.mp4")

        with file_store.transaction() as files:
            new_url = files.replace(old_url, incoming(b"new", "b.mp4"))

        assert file_store.path_for(new_url).read_bytes() == b"new"
        assert not file_store.path_for(old_url).exists()
        # Nothing but the new file is left behind
        assert [p.name for p in file_store.root.iterdir()] == [file_store.path_for(new_url).name]

    def test_rollback_on_exception(self, file_store):
        old_url = file_store.store(incoming(b"old").stream, "a.mp4")
        created = []

        with pytest.raises(RuntimeError):
            with file_store.transaction() as files:
                created.append(files.replace(old_url, incoming(b"new", "b.mp4")))
                raise RuntimeError("database went away")

        assert file_store.path_for(old_url).read_bytes() == b"old"
        assert not file_store.path_for(created[0]).exists()
        assert len(list(file_store.root.iterdir())) == 1

    def test_remove_missing_file_is_ignored(self, file_store):
        with file_store.transaction() as files:
            files.remove("/uploads/gone.zip")
            files.remove(None)

    def test_second_store_failure_cleans_up_first(self, file_store, monkeypatch):
        real_store = file_store.store
        calls = []

        def flaky_store(stream, filename):
            calls.append(filename)
            if len(calls) == 2:
                raise StorageError("disk full")
            return real_store(stream, filename)

        monkeypatch.setattr(file_store, "store", flaky_store)

        with pytest.raises(StorageError):
            with file_store.transaction() as files:
                files.add(incoming(b"video", "demo.mp4"))
                files.add(incoming(b"zip", "tool.zip"))

        assert list(file_store.root.iterdir()) == []
