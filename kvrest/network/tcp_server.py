"""
Async TCP Server Module

This module implements the asynchronous TCP front end for a KV-REST service.

Each connection is handled in its own coroutine. Service calls are
synchronous and run on the event loop thread, so at most one service
operation is in flight at any time.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..config.settings import settings
from ..errors import ServiceError
from ..models.todo import new_todo_service
from ..protocol.commands import Command, CommandType, Response
from ..protocol.parser import ProtocolParser
from ..service.base import Service
from ..service.codec import JSONCodec

logger = logging.getLogger(__name__)


class KVRestServer:
    """
    Asynchronous TCP server for a KV-REST service.

    Features:
    - Non-blocking I/O with asyncio
    - Persistent connections (multiple commands per connection)
    - Service errors reported as ERROR responses, never dropping the connection
    - One Service shared by all connections

    Usage:
        server = KVRestServer(host='0.0.0.0', port=7272)
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address (e.g., '0.0.0.0')
        port: Server port number (e.g., 7272)
        service: The Service shared by all connections
        codec: Codec used to encode returned models
        parser: The ProtocolParser for parsing commands
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            service: Service = None,
            codec: JSONCodec = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            service: Service instance (creates an in-memory todo service if not provided)
            codec: Response codec (default JSONCodec)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.service = service if service is not None else new_todo_service()
        self.codec = codec if codec is not None else JSONCodec()
        self.parser = ProtocolParser()

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._connection_count = 0
        self._total_requests = 0
        self._failed_requests = 0

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Reads commands until the client disconnects or sends QUIT, and
        answers each with exactly one response line.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        self._connection_count += 1
        logger.debug(f"Client connected: {addr}")

        try:
            while True:
                data = await self._read_line(reader)
                if data is None:
                    response = Response.error("request too long")
                    writer.write(self.parser.format_response(response).encode())
                    await writer.drain()
                    continue

                if not data:
                    # Client disconnected
                    logger.debug(f"Client disconnected: {addr}")
                    break

                try:
                    raw = data.decode().rstrip('\r\n')
                except UnicodeDecodeError:
                    response = Response.error("invalid encoding")
                    writer.write(self.parser.format_response(response).encode())
                    await writer.drain()
                    continue

                command = self.parser.parse_request(raw)

                if command.type == CommandType.QUIT:
                    logger.debug(f"Client requested quit: {addr}")
                    break

                if not command.is_valid:
                    response = Response.invalid_command()
                else:
                    self._total_requests += 1
                    response = self._execute_command(command)

                writer.write(self.parser.format_response(response).encode())
                await writer.drain()

        except ConnectionResetError:
            logger.debug(f"Connection reset by client: {addr}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            try:
                writer.close()
                await writer.wait_closed()
            except Exception:
                pass

    @staticmethod
    async def _read_line(reader: StreamReader) -> Optional[bytes]:
        """
        Read one request line.

        Returns:
            The line including its terminator, a partial line or b"" at
            EOF, or None if the line exceeded the stream limit. An
            oversized line is consumed up to and including its newline,
            so the next read starts at the following request.
        """
        try:
            return await reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            return exc.partial
        except asyncio.LimitOverrunError as exc:
            consumed = exc.consumed

        while True:
            await reader.readexactly(consumed)
            try:
                await reader.readuntil(b"\n")
                return None
            except asyncio.IncompleteReadError:
                return None
            except asyncio.LimitOverrunError as exc:
                consumed = exc.consumed

    def _execute_command(self, command: Command) -> Response:
        """
        Execute a parsed command on the service.

        Args:
            command: The Command object to execute

        Returns:
            Response with the encoded result, or an ERROR response
            carrying the service error's code
        """
        try:
            if command.type == CommandType.BROWSE:
                result = self.service.browse(command.params)
            elif command.type == CommandType.DELETE:
                result = self.service.delete(command.params)
            elif command.type == CommandType.CREATE:
                result = self.service.create(command.payload)
            elif command.type == CommandType.SELECT:
                result = self.service.select(command.key)
            elif command.type == CommandType.REMOVE:
                result = self.service.remove(command.key)
            elif command.type == CommandType.UPDATE:
                result = self.service.update(command.key, command.payload)
            elif command.type == CommandType.MODIFY:
                result = self.service.modify(command.key, command.payload)
            else:
                return Response.invalid_command()
        except ServiceError as exc:
            self._failed_requests += 1
            logger.debug(f"{command.type.name} failed: {exc}")
            return Response.from_error(exc)

        return Response.ok(value=self.codec.encode(result))

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Runs forever (or until cancelled). Call from asyncio.run() or
        within an existing event loop.

        Example:
            server = KVRestServer(port=7272)
            asyncio.run(server.start())
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
            limit=settings.READ_BUFFER_SIZE,
        )
        self._running = True

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._running = False

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Closes the server and waits for it to fully shut down.
        """
        if self._server is None:
            return

        self._server.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts, and service statistics where available.
        """
        stats = {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "total_requests": self._total_requests,
            "failed_requests": self._failed_requests,
        }
        if hasattr(self.service, "get_stats"):
            stats["service_stats"] = self.service.get_stats()
        return stats


async def run_server(host: str = None, port: int = None, service: Service = None) -> None:
    """
    Convenience function to create and run the server.

    Args:
        host: Bind address (default from settings)
        port: Port number (default from settings)
        service: Service to expose (default in-memory todo service)

    Usage:
        asyncio.run(run_server(port=7272))
    """
    server = KVRestServer(host=host, port=port, service=service)

    try:
        await server.start()
    except asyncio.CancelledError:
        logger.info("Server shutdown requested")
    finally:
        await server.stop()
