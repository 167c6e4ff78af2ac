"""
Pytest Configuration and Fixtures

This module provides shared fixtures, payload helpers and configuration
for all tests.
"""

import asyncio
import json
import socket
import uuid
from contextlib import closing
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from kvrest.models.todo import Todo, new_todo_service
from kvrest.network.tcp_server import KVRestServer
from kvrest.persistence.handlers import BufferHandler
from kvrest.protocol.parser import ProtocolParser
from kvrest.service.dict_service import DictService
from kvrest.service.io_service import IOService
from kvrest.store.ordered import OrderedDict


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Payload Helpers
# ============================================================================

def random_todo() -> dict:
    """A valid todo payload with unique content."""
    return {
        "content": str(uuid.uuid4()),
        "created_at": datetime.now(timezone.utc).isoformat(),
        "done": False,
    }


def invalid_todo() -> dict:
    """A todo payload that decodes but fails validation (empty content)."""
    return {
        "content": "",
        "created_at": datetime.now(timezone.utc).isoformat(),
        "done": False,
    }


def future_todo() -> dict:
    """A todo payload created in the future."""
    return {
        "content": "from the future",
        "created_at": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
    }


def encode(payload: dict) -> bytes:
    """Encode a payload the way a client would send it."""
    return json.dumps(payload).encode()


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def ordered() -> OrderedDict:
    """Create an empty OrderedDict."""
    return OrderedDict()


@pytest.fixture
def todo() -> Todo:
    """Create a valid Todo."""
    return Todo(content="write tests", created_at=datetime.now(timezone.utc), done=False)


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def service() -> DictService:
    """Create an empty in-memory todo service."""
    return new_todo_service()


@pytest.fixture
def buffer_handler() -> BufferHandler:
    """Create a snapshot handler seeded with an empty todo service."""
    return BufferHandler(new_todo_service)


@pytest.fixture
def io_service(buffer_handler: BufferHandler) -> IOService:
    """Create a todo service persisted to an in-memory buffer."""
    return IOService(buffer_handler)


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[KVRestServer, None]:
    """
    Create and start a server instance for testing.

    This fixture:
    1. Creates a KVRestServer with a fresh todo service on a free port
    2. Starts it in a background task
    3. Yields the server for testing
    4. Cleans up after the test
    """
    srv = KVRestServer(host='127.0.0.1', port=server_port)

    # Start server in background task
    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    await asyncio.sleep(0.1)

    yield srv

    # Cleanup
    await srv.stop()
    server_task.cancel()
    try:
        await server_task
    except asyncio.CancelledError:
        pass


# ============================================================================
# Client Fixtures
# ============================================================================

class AsyncClient:
    """
    Helper class for testing server interactions.

    Usage:
        async with AsyncClient('127.0.0.1', 7272) as client:
            response = await client.send_command("SELECT 0")
            assert response.startswith("OK")
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self.reader = None
        self.writer = None

    async def connect(self) -> None:
        """Establish connection to server."""
        self.reader, self.writer = await asyncio.open_connection(
            self.host, self.port
        )

    async def disconnect(self) -> None:
        """Close connection to server."""
        if self.writer:
            self.writer.close()
            try:
                await self.writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def send_command(self, command: str) -> str:
        """
        Send a command and receive the response.

        Args:
            command: Command string (newline will be added if missing)

        Returns:
            Response string (stripped of trailing newline)
        """
        if not command.endswith('\n'):
            command += '\n'

        self.writer.write(command.encode())
        await self.writer.drain()

        response = await self.reader.readline()
        return response.decode().strip()

    async def send_json(self, command: str):
        """
        Send a command and decode the JSON body of an OK response.

        Raises:
            AssertionError: If the server answered with an error
        """
        response = await self.send_command(command)
        status, _, body = response.partition(" ")
        assert status == "OK", response
        return json.loads(body)

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


@pytest.fixture
def client_factory(server_port: int):
    """
    Factory fixture to create test clients.

    Usage:
        async def test_something(server, client_factory):
            async with client_factory() as client:
                response = await client.send_command("BROWSE")
    """
    def factory() -> AsyncClient:
        return AsyncClient('127.0.0.1', server_port)
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
