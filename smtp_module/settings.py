# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Process settings of the SMTP module."""

from __future__ import annotations

import configparser
import os
from pathlib import Path

from .connection import DEFAULT_SMTP_PORT
from .dispatcher import DEFAULT_SMTP_TIMEOUT
from .transport import DEFAULT_MAX_PACKAGE_SIZE


def load_settings(config_path: str | os.PathLike | None = None) -> dict[str, object]:
    """
    Load settings from an INI file (default: config.ini) with environment variables as fallbacks.

    Environment variables (all prefixed with SMTP_MODULE_):
      SMTP_MODULE_CONFIG - Path to config.ini file (default: config.ini)
      SMTP_MODULE_LOG_LEVEL - Logging level (default: INFO)
      SMTP_MODULE_LOG_DELIVERY_ACTIVITY - Log every delivery at INFO (default: False)
      SMTP_MODULE_DEFAULT_PORT - Port used when the host has no :port suffix (default: 25)
      SMTP_MODULE_TIMEOUT - aiosmtplib timeout in seconds (default: 60)
      SMTP_MODULE_MAX_PACKAGE_SIZE - Largest accepted inbound package in bytes (default: 64 MiB)
      SMTP_MODULE_METRICS_PORT - Port for the Prometheus exporter (default: disabled)

    Config file sections/keys:
      [logging] level, delivery_activity
      [smtp] default_port, timeout
      [transport] max_package_size
      [metrics] port, host

    The file is optional; a missing file leaves only the environment and defaults.
    """
    if config_path is None:
        config_path = os.getenv("SMTP_MODULE_CONFIG", "config.ini")
    parser = configparser.ConfigParser()
    parser.read(Path(config_path))

    def get(section: str, option: str, fallback: str | None = None) -> str | None:
        if parser.has_option(section, option):
            return parser.get(section, option)
        return fallback

    def get_int(section: str, option: str, fallback: str | None = None, default: int | None = None) -> int | None:
        value = get(section, option, fallback)
        if value is None or not str(value).strip():
            return default
        return int(value)

    def get_bool(section: str, option: str, fallback: str | None = None, default: bool | None = None) -> bool | None:
        value = get(section, option, fallback)
        if value is None:
            return default
        normalized = str(value).strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        return default

    def get_float(section: str, option: str, fallback: str | None = None, default: float | None = None) -> float | None:
        value = get(section, option, fallback)
        if value is None or not str(value).strip():
            return default
        return float(value)

    settings = {
        "log_level": get("logging", "level", os.getenv("SMTP_MODULE_LOG_LEVEL", "INFO")),
        "log_delivery_activity": get_bool(
            "logging",
            "delivery_activity",
            os.getenv("SMTP_MODULE_LOG_DELIVERY_ACTIVITY"),
            default=False,
        ),
        "default_port": get_int(
            "smtp", "default_port", os.getenv("SMTP_MODULE_DEFAULT_PORT"), default=DEFAULT_SMTP_PORT
        ),
        "smtp_timeout": get_float(
            "smtp", "timeout", os.getenv("SMTP_MODULE_TIMEOUT"), default=DEFAULT_SMTP_TIMEOUT
        ),
        "max_package_size": get_int(
            "transport",
            "max_package_size",
            os.getenv("SMTP_MODULE_MAX_PACKAGE_SIZE"),
            default=DEFAULT_MAX_PACKAGE_SIZE,
        ),
        "metrics_port": get_int("metrics", "port", os.getenv("SMTP_MODULE_METRICS_PORT")),
        "metrics_host": get("metrics", "host", os.getenv("SMTP_MODULE_METRICS_HOST", "127.0.0.1")),
    }

    level = settings["log_level"]
    settings["log_level"] = str(level).strip().upper() or "INFO"
    return settings
