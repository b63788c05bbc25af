"""
KV-Session Configuration Settings

This module contains all configuration constants for the KV-Session server.
Environment variables override the network and logging defaults.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings (port 0 asks the OS for an ephemeral port)
    HOST: str = os.environ.get("KV_SESSION_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("KV_SESSION_PORT", "0"))

    # Store settings
    MAX_KEY_LENGTH: int = 10
    WILDCARD_KEY: str = "*"

    # Framing settings (payload limit of the 2-byte length prefix)
    MAX_FRAME_LENGTH: int = 65535

    # Logging settings
    DEBUG: bool = os.environ.get("KV_SESSION_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("KV_SESSION_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
