# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Error taxonomy of the SMTP module.

Every error carries a machine readable ``code`` next to the human message.
Decode, validation and send errors are turned into per-request exception
replies, configuration errors into a configuration nack. A transport error is
the only one that stops the worker.
"""

from __future__ import annotations


class ModuleError(Exception):
    """Base class for all errors raised by the module."""

    code = "module_error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class DecodeError(ModuleError):
    """Raised when a payload cannot be unpacked into the expected schema."""

    code = "decode_error"


class ConfigError(ModuleError):
    """Raised when a configuration update is rejected."""

    code = "config_error"


class RequestValidationError(ModuleError):
    """Raised when a decoded mail request breaks a business rule."""

    code = "validation_error"


class SendError(ModuleError):
    """Raised when the mail could not be handed over to the SMTP server."""

    code = "transport_failure"


class NotConfiguredError(SendError):
    """Raised when a mail request arrives before any accepted configuration."""

    def __init__(self, message: str = "SMTP module is not configured"):
        super().__init__(message, code="not_configured")


class TransportError(ModuleError):
    """Raised when the package stream between host and worker is broken."""

    code = "transport_error"
