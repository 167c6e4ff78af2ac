"""
KV-REST Configuration Settings

This module contains all configuration constants for the KV-REST server
and the store it fronts. Values can be overridden through environment
variables before the module is imported.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server and store configuration settings."""

    # Network settings
    HOST: str = os.environ.get("KV_REST_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("KV_REST_PORT", "7272"))

    # Store settings
    INITIAL_CAPACITY: int = 8  # Capacity hint for a freshly created dict
    MAX_KEY_LENGTH: int = 256
    MAX_PAYLOAD_LENGTH: int = 65536

    # Persistence settings
    SNAPSHOT_PATH: str = os.environ.get("KV_REST_SNAPSHOT", "")  # Empty = in-memory only

    # Connection settings
    READ_BUFFER_SIZE: int = 65536 + 1024  # Payload plus command and key

    # Logging settings
    DEBUG: bool = os.environ.get("KV_REST_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("KV_REST_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
