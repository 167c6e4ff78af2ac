#!/usr/bin/env python3
"""
KV-REST Server Entry Point

This is the main entry point for starting the KV-REST server with the
bundled Todo model.

Usage:
    python -m kvrest.server                        # Default settings (0.0.0.0:7272)
    python -m kvrest.server --port 8080            # Custom port
    python -m kvrest.server --host 127.0.0.1       # Custom host
    python -m kvrest.server --snapshot todos.db    # Persist snapshots to a file
    python -m kvrest.server --debug                # Enable debug logging

Environment Variables:
    KV_REST_HOST        - Server bind address
    KV_REST_PORT        - Server port
    KV_REST_SNAPSHOT    - Snapshot file (empty = in-memory only)
    KV_REST_DEBUG       - Enable debug mode (true/false)
    KV_REST_LOG_LEVEL   - Log level when not in debug mode
"""

import argparse
import asyncio
import logging
import signal
import sys

from .config.settings import settings
from .models.todo import new_todo_service
from .network.tcp_server import KVRestServer
from .persistence.handlers import new_file_service
from .service.base import Service


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="KV-REST: Ordered In-Memory CRUD Store Server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        type=str,
        default=settings.HOST,
        help="Host address to bind to",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=settings.PORT,
        help="Port number to listen on",
    )

    parser.add_argument(
        "--snapshot",
        type=str,
        default=settings.SNAPSHOT_PATH,
        help="Snapshot file to persist the store to (empty keeps it in memory)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args()


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag and settings.LOG_LEVEL."""
    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def build_service(snapshot: str) -> Service:
    """Create the todo service, file persisted if a snapshot path is given."""
    if snapshot:
        return new_file_service(snapshot, new_todo_service)
    return new_todo_service()


def main() -> None:
    """Main entry point for the server."""
    args = parse_args()

    # Setup logging
    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    service = build_service(args.snapshot)
    server = KVRestServer(host=args.host, port=args.port, service=service)

    # Get or create event loop
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

    async def shutdown(sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        logger.info(f"Received signal {sig.name}, initiating shutdown...")
        await server.stop()

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(
                sig,
                lambda s=sig: asyncio.create_task(shutdown(s))
            )

    # Log startup info
    logger.info("Starting KV-REST server")
    logger.info(f"  Host: {args.host}")
    logger.info(f"  Port: {args.port}")
    logger.info(f"  Snapshot: {args.snapshot or '(in-memory)'}")
    logger.info(f"  Debug: {args.debug}")

    # Run the server
    try:
        loop.run_until_complete(server.start())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
        loop.run_until_complete(server.stop())
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
    finally:
        # Cleanup
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        except Exception:
            pass
        loop.close()
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
