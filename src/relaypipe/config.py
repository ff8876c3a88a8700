# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for relaypipe."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"relaypipe/{__version__}"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ClientSettings:
    """Process-wide defaults applied to destinations that do not override them."""

    connect_timeout: float = 10.0
    request_timeout: float = 30.0
    idle_timeout: float = 60.0
    max_connections: int = 10
    max_body_bytes: int = 16 * 1024 * 1024
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("RELAYPIPE_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        max_connections = _int_env("RELAYPIPE_MAX_CONNECTIONS", cls.max_connections)
        if max_connections <= 0:
            max_connections = cls.max_connections
        return cls(
            connect_timeout=_float_env("RELAYPIPE_CONNECT_TIMEOUT", cls.connect_timeout),
            request_timeout=_float_env("RELAYPIPE_REQUEST_TIMEOUT", cls.request_timeout),
            idle_timeout=_float_env("RELAYPIPE_IDLE_TIMEOUT", cls.idle_timeout),
            max_connections=max_connections,
            max_body_bytes=max_body_bytes,
            user_agent=os.getenv("RELAYPIPE_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("RELAYPIPE_VERIFY_SSL", cls.verify_ssl),
        )


def load_client_settings() -> ClientSettings:
    """Load client settings from environment with sensible defaults."""
    return ClientSettings.from_env()
