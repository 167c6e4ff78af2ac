"""Persistence module for KV-REST."""

from .handlers import BufferHandler, FileHandler, PickleHandler, new_file_service

__all__ = ["BufferHandler", "FileHandler", "PickleHandler", "new_file_service"]
