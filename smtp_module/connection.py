# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Single-slot SMTP connection state driven by configuration updates."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import ConfigError
from .models import ModuleConfig

DEFAULT_SMTP_PORT = 25
IMPLICIT_TLS_PORT = 465


class ModuleStatus(str, Enum):
    """Configuration state of the module."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"


@dataclass(frozen=True)
class PlainCredentials:
    """PLAIN authentication bound to the server hostname."""

    username: str
    password: str
    host: str

    def __repr__(self) -> str:
        return f"PlainCredentials(username={self.username!r}, host={self.host!r})"


@dataclass(frozen=True)
class SmtpConnection:
    """Resolved SMTP server parameters used by every mail dispatch."""

    host: str
    hostname: str
    port: int
    credentials: PlainCredentials | None = None

    @property
    def use_tls(self) -> bool:
        """Implicit TLS on the submissions port, STARTTLS otherwise."""
        return self.port == IMPLICIT_TLS_PORT


def _split_host(host: str, default_port: int) -> tuple[str, int]:
    """Split ``hostname[:port]``; IPv6 literals must be bracketed, ``[::1]:25``."""
    if host.startswith("["):
        address, bracket, rest = host[1:].partition("]")
        if not bracket:
            raise ConfigError(f"SMTP Host has an unclosed IPv6 literal: {host!r}", code="invalid_host")
        if not rest:
            return address, default_port
        if not rest.startswith(":"):
            raise ConfigError(f"SMTP Host has an invalid port: {rest!r}", code="invalid_port")
        hostname, port_text = address, rest[1:]
    else:
        hostname, sep, port_text = host.partition(":")
        if not sep:
            return hostname, default_port
    try:
        port = int(port_text)
    except ValueError:
        raise ConfigError(f"SMTP Host has an invalid port: {port_text!r}", code="invalid_port") from None
    if not 0 < port < 65536:
        raise ConfigError(f"SMTP Host port out of range: {port}", code="invalid_port")
    return hostname, port


def build_connection(config: ModuleConfig, default_port: int = DEFAULT_SMTP_PORT) -> SmtpConnection:
    """Validate ``config`` and resolve it into an :class:`SmtpConnection`."""
    if not config.host:
        raise ConfigError("SMTP Host must not be empty", code="missing_host")
    if config.auth is not None and len(config.auth) != 2:
        raise ConfigError(
            "SMTP Auth must be an array with a username and password",
            code="bad_auth_shape",
        )
    hostname, port = _split_host(config.host, default_port)
    if not hostname:
        raise ConfigError("SMTP Host must not be empty", code="missing_host")

    credentials = None
    if config.auth is not None:
        username, password = config.auth
        credentials = PlainCredentials(username=username, password=password, host=hostname)
    return SmtpConnection(host=config.host, hostname=hostname, port=port, credentials=credentials)


class ConnectionState:
    """Owned holder of the live SMTP connection parameters.

    The slot starts empty and is only replaced by a successful
    :meth:`apply`; a rejected configuration leaves it untouched. One loop
    reads and writes it, so no lock is needed.
    """

    def __init__(self, default_port: int = DEFAULT_SMTP_PORT):
        self.default_port = default_port
        self._current: SmtpConnection | None = None

    @property
    def current(self) -> SmtpConnection | None:
        return self._current

    @property
    def configured(self) -> bool:
        return self._current is not None

    @property
    def status(self) -> ModuleStatus:
        return ModuleStatus.CONFIGURED if self.configured else ModuleStatus.UNCONFIGURED

    def apply(self, config: ModuleConfig) -> SmtpConnection:
        """Replace the slot with ``config`` or raise :class:`ConfigError`."""
        connection = build_connection(config, self.default_port)
        self._current = connection
        return connection
