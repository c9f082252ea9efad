# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Framed package stream between the host and the worker.

:class:`PackageReader` turns the inbound byte stream into two queues, one for
framed packages and one for transport errors. :class:`PackageWriter` frames
replies on the way back.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any, Protocol

from .codec import pack
from .errors import TransportError
from .logger import get_logger
from .protocol import (
    HEADER_SIZE,
    ConfigAck,
    ConfigNack,
    ExceptionReply,
    Package,
    PackageType,
    Reply,
    Response,
    decode_header,
    encode_frame,
)

DEFAULT_MAX_PACKAGE_SIZE = 64 * 1024 * 1024


class ByteWriter(Protocol):
    def write(self, data: bytes) -> Any: ...

    async def drain(self) -> None: ...


class PackageReader:
    """Read frames from ``reader`` into :attr:`packages` and :attr:`errors`."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        *,
        max_package_size: int = DEFAULT_MAX_PACKAGE_SIZE,
        logger=None,
    ):
        self.reader = reader
        self.max_package_size = max_package_size
        self.logger = logger or get_logger("smtp.transport")
        self.packages: asyncio.Queue[Package] = asyncio.Queue()
        self.errors: asyncio.Queue[TransportError] = asyncio.Queue()
        self._task: asyncio.Task | None = None

    async def read_package(self) -> Package:
        """Read exactly one frame, raising :class:`TransportError` on failure."""
        try:
            header = await self.reader.readexactly(HEADER_SIZE)
        except asyncio.IncompleteReadError as exc:
            if not exc.partial:
                raise TransportError("connection closed by host") from exc
            raise TransportError(f"truncated package header ({len(exc.partial)} bytes)") from exc

        size, pid, tp, check = decode_header(header)
        if tp != check ^ 0xFF:
            raise TransportError(f"invalid package check bit (type={tp}, check={check})")
        if size > self.max_package_size:
            raise TransportError(f"package too large ({size} > {self.max_package_size} bytes)")

        try:
            data = await self.reader.readexactly(size) if size else b""
        except asyncio.IncompleteReadError as exc:
            raise TransportError(
                f"truncated package payload ({len(exc.partial)} of {size} bytes)"
            ) from exc
        return Package(pid=pid, tp=tp, data=data)

    async def read_loop(self) -> None:
        """Forward packages until the first transport error."""
        while True:
            try:
                pkg = await self.read_package()
            except TransportError as exc:
                await self.errors.put(exc)
                return
            except OSError as exc:
                await self.errors.put(TransportError(f"read failed: {exc}"))
                return
            self.logger.debug("Received package pid=%d tp=%d size=%d", pkg.pid, pkg.tp, len(pkg.data))
            await self.packages.put(pkg)

    def start(self) -> asyncio.Task:
        """Start :meth:`read_loop` in the background."""
        if self._task is None:
            self._task = asyncio.create_task(self.read_loop(), name="smtp-package-reader")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None


class PackageWriter:
    """Frame replies and write them to ``writer``."""

    def __init__(self, writer: ByteWriter):
        self.writer = writer

    async def write_package(self, pid: int, tp: int, data: bytes = b"") -> None:
        self.writer.write(encode_frame(pid, tp, data))
        await self.writer.drain()

    async def write_reply(self, reply: Reply) -> None:
        """Serialize one reply to its wire frame."""
        if isinstance(reply, ConfigAck):
            await self.write_package(0, PackageType.MODULE_CONF_OK)
        elif isinstance(reply, ConfigNack):
            await self.write_package(0, PackageType.MODULE_CONF_ERR)
        elif isinstance(reply, Response):
            await self.write_package(reply.pid, PackageType.MODULE_RES, pack(reply.value))
        elif isinstance(reply, ExceptionReply):
            await self.write_package(
                reply.pid,
                PackageType.MODULE_ERR,
                pack([int(reply.kind), reply.message]),
            )
        else:
            raise TypeError(f"unsupported reply {reply!r}")


async def open_stdio(limit: int = 2 ** 16) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Wrap the process stdin/stdout into asyncio streams."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=limit)
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin.buffer)
    transport, protocol = await loop.connect_write_pipe(
        asyncio.streams.FlowControlMixin, sys.stdout.buffer
    )
    writer = asyncio.StreamWriter(transport, protocol, reader, loop)
    return reader, writer
