"""
Snapshot Handlers

IOHandler implementations that pickle a DictService's state into a byte
buffer or a file. Loading builds a fresh service with the configured
builder and restores the snapshot into it, so hooks such as the model
builder and filter factory are never serialized.

Model classes are pickled by reference and must be importable wherever
the snapshot is loaded.
"""

import logging
import os
import pickle
import tempfile
from abc import abstractmethod

from ..service.base import ServiceBuilder
from ..service.dict_service import DictService
from ..service.io_service import IOHandler, IOService

logger = logging.getLogger(__name__)


class PickleHandler(IOHandler):
    """
    Base class for handlers storing pickled DictService snapshots.

    Subclasses provide write_bytes() and read_bytes().

    Attributes:
        build: Service builder used to reconstruct services on load
    """

    def __init__(self, build: ServiceBuilder):
        self.build = build

    @abstractmethod
    def write_bytes(self, data: bytes) -> None:
        """Store a pickled snapshot."""

    @abstractmethod
    def read_bytes(self) -> bytes:
        """Return the last stored snapshot."""

    def save(self, service: DictService) -> None:
        self.write_bytes(pickle.dumps(service.state(), protocol=pickle.HIGHEST_PROTOCOL))

    def load(self) -> DictService:
        service = self.build()
        service.restore(pickle.loads(self.read_bytes()))
        return service


class BufferHandler(PickleHandler):
    """
    Handler keeping the snapshot in memory.

    The buffer is seeded with an empty service so the first load succeeds.
    """

    def __init__(self, build: ServiceBuilder):
        super().__init__(build)
        self.buffer = b""
        self.save(build())

    def write_bytes(self, data: bytes) -> None:
        self.buffer = data

    def read_bytes(self) -> bytes:
        return self.buffer


class FileHandler(PickleHandler):
    """
    Handler keeping the snapshot in a file.

    Saves go to a temporary file in the same directory which then
    replaces the snapshot, so a crash mid-save keeps the previous one.
    If the file does not exist yet it is seeded with an empty service.

    Attributes:
        path: Location of the snapshot file
    """

    def __init__(self, path: str, build: ServiceBuilder):
        super().__init__(build)
        self.path = path
        if not os.path.exists(path):
            logger.info(f"Creating empty snapshot at {path}")
            self.save(build())

    def write_bytes(self, data: bytes) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".snapshot-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def read_bytes(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()


def new_file_service(path: str, build: ServiceBuilder) -> IOService:
    """
    Create a file persisted service.

    Args:
        path: Snapshot file location
        build: Builder for the in-memory service that is persisted

    Returns:
        IOService reading and writing snapshots at ``path``
    """
    return IOService(FileHandler(path, build))
