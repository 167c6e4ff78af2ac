"""Network module for KV-REST."""

from .tcp_server import KVRestServer, run_server

__all__ = ["KVRestServer", "run_server"]
