# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Protocol loop of the SMTP module.

The handler owns the connection state and processes one package at a time,
in arrival order:

- ``MODULE_CONF``: decode, apply, answer with a configuration ack or nack
- ``MODULE_REQ``: decode, validate, send, answer with a response or exception
- anything else: logged, no reply

A failure while handling a single package never stops the loop. A transport
error does: it is logged, :attr:`ModuleHandler.shutdown` is set and the loop
returns so that the host can restart the worker.
"""

from __future__ import annotations

import asyncio

from .codec import decode
from .connection import DEFAULT_SMTP_PORT, ConnectionState, ModuleStatus
from .dispatcher import MailDispatcher
from .errors import ConfigError, DecodeError, RequestValidationError, SendError, TransportError
from .logger import get_logger
from .models import MailRequest, ModuleConfig
from .prometheus import ModuleMetrics
from .protocol import (
    ConfigAck,
    ConfigNack,
    ExceptionKind,
    ExceptionReply,
    Package,
    PackageType,
    Reply,
    Response,
)
from .transport import PackageReader, PackageWriter


class ModuleHandler:
    """Route packages to configuration handling or mail dispatch."""

    def __init__(
        self,
        writer: PackageWriter,
        *,
        dispatcher: MailDispatcher | None = None,
        state: ConnectionState | None = None,
        metrics: ModuleMetrics | None = None,
        logger=None,
        default_port: int = DEFAULT_SMTP_PORT,
    ):
        self.writer = writer
        self.dispatcher = dispatcher or MailDispatcher()
        self.state = state or ConnectionState(default_port=default_port)
        self.metrics = metrics or ModuleMetrics()
        self.logger = logger or get_logger("smtp.handler")
        self.shutdown = asyncio.Event()

    @property
    def status(self) -> ModuleStatus:
        return self.state.status

    # ---------------------------------------------------------------- routing
    async def handle_package(self, pkg: Package) -> Reply | None:
        """Return the reply for ``pkg``; ``None`` for unknown package types."""
        kind = pkg.kind
        if kind is PackageType.MODULE_CONF:
            return self._on_config(pkg)
        if kind is PackageType.MODULE_REQ:
            return await self._on_request(pkg)
        self.logger.warning("Unexpected package type: %d", pkg.tp)
        return None

    def _on_config(self, pkg: Package) -> Reply:
        try:
            config = decode(pkg.data, ModuleConfig)
        except DecodeError as exc:
            self.logger.error("Missing or invalid SMTP configuration: %s", exc)
            self.metrics.inc_config(False)
            return ConfigNack()
        try:
            connection = self.state.apply(config)
        except ConfigError as exc:
            self.logger.error("%s (%s)", exc, exc.code)
            self.metrics.inc_config(False)
            return ConfigNack()

        self.logger.info(
            "SMTP configured: %s:%d (%s)",
            connection.hostname,
            connection.port,
            "authenticated" if connection.credentials else "unauthenticated",
        )
        self.metrics.inc_config(True)
        return ConfigAck()

    async def _on_request(self, pkg: Package) -> Reply:
        try:
            request = decode(pkg.data, MailRequest)
        except DecodeError as exc:
            self.logger.warning("Failed to unpack request pid=%d: %s", pkg.pid, exc)
            return self._exception(pkg, ExceptionKind.BAD_DATA, "failed to unpack request")

        try:
            await self.dispatcher.dispatch(request, self.state.current)
        except RequestValidationError as exc:
            self.logger.warning("Rejected request pid=%d: %s", pkg.pid, exc)
            return self._exception(pkg, ExceptionKind.BAD_DATA, str(exc))
        except SendError as exc:
            self.logger.warning("Request pid=%d failed (%s): %s", pkg.pid, exc.code, exc)
            return self._exception(pkg, ExceptionKind.OPERATION_FAILED, str(exc))
        except Exception as exc:  # pragma: no cover
            self.logger.exception("Unhandled error while handling request pid=%d", pkg.pid)
            return self._exception(pkg, ExceptionKind.OPERATION_FAILED, f"unexpected error: {exc}")

        self.metrics.inc_sent()
        return Response(pkg.pid, None)

    def _exception(self, pkg: Package, kind: ExceptionKind, message: str) -> ExceptionReply:
        self.metrics.inc_error(kind.name.lower())
        return ExceptionReply(pkg.pid, kind, message)

    # ------------------------------------------------------------------- loop
    async def _process(self, pkg: Package) -> bool:
        """Handle ``pkg`` and write its reply; ``False`` when the write failed."""
        reply = await self.handle_package(pkg)
        if reply is None:
            return True
        try:
            await self.writer.write_reply(reply)
        except OSError as exc:
            self._on_transport_error(TransportError(f"write failed: {exc}"))
            return False
        return True

    def _on_transport_error(self, exc: TransportError) -> None:
        if self.shutdown.is_set():
            return
        self.logger.error("Error: %s", exc)
        self.shutdown.set()

    async def run(self, reader: PackageReader) -> None:
        """Process packages until the transport reports an error.

        Packages framed before the error are still answered; nothing is
        written once :attr:`shutdown` is set.
        """
        pkg_get: asyncio.Task | None = None
        err_get: asyncio.Task | None = None
        try:
            while not self.shutdown.is_set():
                if pkg_get is None:
                    pkg_get = asyncio.create_task(reader.packages.get())
                if err_get is None:
                    err_get = asyncio.create_task(reader.errors.get())
                done, _ = await asyncio.wait({pkg_get, err_get}, return_when=asyncio.FIRST_COMPLETED)

                if pkg_get in done:
                    pkg = pkg_get.result()
                    pkg_get = None
                    if not await self._process(pkg):
                        break
                    continue

                error = err_get.result()
                err_get = None
                pkg_get.cancel()
                await asyncio.gather(pkg_get, return_exceptions=True)
                pkg_get = None
                while not reader.packages.empty():
                    if not await self._process(reader.packages.get_nowait()):
                        break
                self._on_transport_error(error)
        finally:
            for task in (pkg_get, err_get):
                if task is not None:
                    task.cancel()
