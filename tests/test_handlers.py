"""
Tests for Snapshot Handlers

These tests verify BufferHandler and FileHandler:
- save() then load() reproduces the same models in the same order
- FileHandler seeds missing files and replaces snapshots atomically
- new_file_service() persists across service instances

Run with: python -m pytest tests/test_handlers.py -v
"""

import os

import pytest
from kvrest.errors import PersistenceError
from kvrest.models.todo import new_todo_service
from kvrest.persistence.handlers import BufferHandler, FileHandler, PickleHandler, new_file_service
from kvrest.service.io_service import IOService
from tests.conftest import encode, random_todo


def populated_service(count: int = 10):
    """Create an in-memory todo service holding ``count`` todos."""
    service = new_todo_service()
    for _ in range(count):
        service.create(encode(random_todo()))
    return service


class TestPickleHandler:
    """Test the PickleHandler base class."""

    def test_storage_hooks_are_abstract(self):
        """Test a handler missing read_bytes() cannot be created."""
        class WriteOnlyHandler(PickleHandler):
            def write_bytes(self, data: bytes) -> None:
                pass

        with pytest.raises(TypeError):
            WriteOnlyHandler(new_todo_service)


class TestBufferHandler:
    """Test BufferHandler."""

    def test_seeded_with_empty_service(self, buffer_handler: BufferHandler):
        """Test the first load returns an empty service."""
        service = buffer_handler.load()
        assert service.browse() == []
        assert service.count == 0

    def test_round_trip(self, buffer_handler: BufferHandler):
        """Test save then load reproduces browse output and counter."""
        original = populated_service()
        original.remove("4")

        buffer_handler.save(original)
        loaded = buffer_handler.load()

        assert loaded.browse() == original.browse()
        assert loaded.dict.keys == original.dict.keys
        assert loaded.count == original.count

    def test_load_returns_independent_copies(self, buffer_handler: BufferHandler):
        """Test mutating a loaded service does not touch the snapshot."""
        buffer_handler.save(populated_service(3))

        loaded = buffer_handler.load()
        loaded.delete()

        assert len(buffer_handler.load().browse()) == 3

    def test_loaded_service_keeps_hooks(self, buffer_handler: BufferHandler):
        """Test loaded services filter with the builder's filter factory."""
        buffer_handler.save(populated_service(4))
        loaded = buffer_handler.load()
        assert [t.key for t in loaded.browse({"done": "true"})] == ["1", "3"]


class TestFileHandler:
    """Test FileHandler."""

    def test_seeds_missing_file(self, tmp_path):
        """Test a missing snapshot file is created empty."""
        path = tmp_path / "todos.db"

        handler = FileHandler(str(path), new_todo_service)

        assert path.exists()
        assert handler.load().browse() == []

    def test_keeps_existing_file(self, tmp_path):
        """Test an existing snapshot is not overwritten on construction."""
        path = str(tmp_path / "todos.db")
        FileHandler(path, new_todo_service).save(populated_service(3))

        handler = FileHandler(path, new_todo_service)

        assert len(handler.load().browse()) == 3

    def test_round_trip(self, tmp_path):
        """Test save then load reproduces browse output."""
        handler = FileHandler(str(tmp_path / "todos.db"), new_todo_service)
        original = populated_service()

        handler.save(original)

        assert handler.load().browse() == original.browse()

    def test_save_leaves_no_temp_files(self, tmp_path):
        """Test saving replaces the snapshot without leftovers."""
        handler = FileHandler(str(tmp_path / "todos.db"), new_todo_service)

        for count in range(3):
            handler.save(populated_service(count))

        assert os.listdir(tmp_path) == ["todos.db"]

    def test_corrupt_file_surfaces_as_persistence_error(self, tmp_path):
        """Test an unreadable snapshot is reported by the IO service."""
        path = tmp_path / "todos.db"
        service = IOService(FileHandler(str(path), new_todo_service))
        path.write_bytes(b"not a pickle")

        with pytest.raises(PersistenceError) as exc_info:
            service.browse()

        assert exc_info.value.operation == "browse"

    def test_deleted_file_surfaces_as_persistence_error(self, tmp_path):
        """Test a snapshot removed behind the service's back fails to load."""
        path = tmp_path / "todos.db"
        service = new_file_service(str(path), new_todo_service)
        path.unlink()

        with pytest.raises(PersistenceError) as exc_info:
            service.create(encode(random_todo()))

        assert exc_info.value.operation == "create"
        assert isinstance(exc_info.value.cause, FileNotFoundError)


class TestFileService:
    """Test new_file_service()."""

    def test_persists_across_instances(self, tmp_path):
        """Test a second service over the same file sees earlier writes."""
        path = str(tmp_path / "todos.db")
        first = new_file_service(path, new_todo_service)
        for _ in range(10):
            first.create(encode(random_todo()))
        first.delete({"done": "true"})

        second = new_file_service(path, new_todo_service)

        assert [t.key for t in second.browse()] == ["0", "2", "4", "6", "8"]
        assert second.create(encode(random_todo())).key == "10"
