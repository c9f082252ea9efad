# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Wiring of transport, handler and collaborators for one worker process."""

from __future__ import annotations

import asyncio

from . import MODULE_NAME
from .dispatcher import MailDispatcher
from .handler import ModuleHandler
from .logger import get_logger
from .prometheus import ModuleMetrics
from .transport import PackageReader, PackageWriter, open_stdio

logger = get_logger("smtp")


def build_handler(settings: dict[str, object], writer: PackageWriter) -> ModuleHandler:
    """Create a :class:`ModuleHandler` configured from ``settings``."""
    dispatcher = MailDispatcher(
        timeout=float(settings["smtp_timeout"]),
        log_delivery_activity=bool(settings.get("log_delivery_activity")),
    )
    metrics = ModuleMetrics()
    metrics_port = settings.get("metrics_port")
    if metrics_port:
        metrics.serve(int(metrics_port), addr=str(settings.get("metrics_host") or "127.0.0.1"))
        logger.info("Prometheus metrics on %s:%s", settings.get("metrics_host"), metrics_port)
    return ModuleHandler(
        writer,
        dispatcher=dispatcher,
        metrics=metrics,
        default_port=int(settings["default_port"]),
    )


async def serve(
    settings: dict[str, object],
    stream_reader: asyncio.StreamReader,
    stream_writer,
) -> ModuleHandler:
    """Run the protocol loop over the given streams until the transport fails."""
    reader = PackageReader(stream_reader, max_package_size=int(settings["max_package_size"]))
    handler = build_handler(settings, PackageWriter(stream_writer))
    reader.start()
    try:
        await handler.run(reader)
    finally:
        await reader.stop()
    return handler


async def run_module(settings: dict[str, object]) -> None:
    """Start the ``smtp`` module on stdin/stdout."""
    logger.info("Starting module %r", MODULE_NAME)
    stream_reader, stream_writer = await open_stdio()
    try:
        await serve(settings, stream_reader, stream_writer)
    finally:
        stream_writer.close()
    logger.info("Module %r stopped", MODULE_NAME)
