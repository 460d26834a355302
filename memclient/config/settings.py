"""
memclient Configuration Settings

Protocol limits used by the client, plus the connection defaults picked up
by the interactive shell. The client itself only reads the constants; the
environment-backed fields are consumed by memclient.cli.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Client configuration settings."""

    # Connection defaults (CLI only)
    NETWORK: str = os.environ.get("MEMCLIENT_NETWORK", "tcp")
    ADDRESS: str = os.environ.get("MEMCLIENT_ADDRESS", "localhost:11211")
    TIMEOUT: float = float(os.environ.get("MEMCLIENT_TIMEOUT", "5.0"))

    # Protocol limits
    MAX_KEY_LENGTH: int = 250
    READ_BUFFER_SIZE: int = 4096

    # Logging settings
    DEBUG: bool = os.environ.get("MEMCLIENT_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("MEMCLIENT_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
