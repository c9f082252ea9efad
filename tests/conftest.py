import asyncio
from typing import Any

import msgpack
import pytest

from smtp_module.protocol import HEADER


class DummySMTP:
    def __init__(self, hostname=None, port=None, use_tls=False, start_tls=None, timeout=None):
        self.hostname = hostname
        self.port = port
        self.use_tls = use_tls
        self.start_tls = start_tls
        self.timeout = timeout
        self.connect_error: Exception | None = None
        self.send_error: Exception | None = None
        self.login_credentials = None
        self.connected = False
        self.closed = False
        self.sent: list[dict[str, Any]] = []

    async def connect(self):
        if self.connect_error:
            raise self.connect_error
        self.connected = True

    async def login(self, user, password):
        self.login_credentials = (user, password)

    async def send_message(self, message, sender=None, **_kwargs):
        if self.send_error:
            raise self.send_error
        self.sent.append({"message": message, "sender": sender})

    async def quit(self):
        self.closed = True


class DummySMTPFactory:
    def __init__(self):
        self.created: list[DummySMTP] = []
        self.connect_error: Exception | None = None
        self.send_error: Exception | None = None

    def __call__(self, **kwargs):
        smtp = DummySMTP(**kwargs)
        smtp.connect_error = self.connect_error
        smtp.send_error = self.send_error
        self.created.append(smtp)
        return smtp

    @property
    def sent(self) -> list[dict[str, Any]]:
        return [item for smtp in self.created for item in smtp.sent]


@pytest.fixture
def smtp_factory(monkeypatch):
    factory = DummySMTPFactory()
    monkeypatch.setattr("smtp_module.dispatcher.aiosmtplib.SMTP", factory)
    return factory


class BufferWriter:
    """Byte sink standing in for the stdout stream writer."""

    def __init__(self):
        self.data = bytearray()
        self.fail_with: Exception | None = None

    def write(self, data: bytes):
        if self.fail_with:
            raise self.fail_with
        self.data.extend(data)

    async def drain(self):
        await asyncio.sleep(0)

    def frames(self) -> list[tuple[int, int, Any]]:
        """Split the written bytes into ``(pid, tp, payload)`` tuples."""
        frames = []
        view = bytes(self.data)
        while view:
            size, pid, tp, check = HEADER.unpack(view[:HEADER.size])
            assert check == tp ^ 0xFF
            payload = view[HEADER.size:HEADER.size + size]
            frames.append((pid, tp, msgpack.unpackb(payload, raw=False) if payload else None))
            view = view[HEADER.size + size:]
        return frames


@pytest.fixture
def buffer_writer():
    return BufferWriter()
