# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging helpers for the SMTP module.

Handlers and format are configured once by the entry point (``main.py`` or
the ``smtp-module`` command). Records always go to stderr because stdout
carries the package stream back to the host.

Example:
    Typical usage in a module::

        from smtp_module.logger import get_logger

        logger = get_logger("smtp.handler")
        logger.info("Configuration accepted")
"""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] smtp: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "smtp") -> logging.Logger:
    """Return the logger bound to ``name``.

    No handler is attached here; see :func:`configure_logging`.
    """
    return logging.getLogger(name)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger for the worker process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=True,  # Force reconfiguration to avoid duplicate handlers
    )
