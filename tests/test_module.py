import asyncio

import msgpack
import pytest

from smtp_module.module import build_handler, serve
from smtp_module.protocol import PackageType, encode_frame
from smtp_module.settings import load_settings
from smtp_module.transport import PackageWriter


@pytest.fixture
def settings(tmp_path, monkeypatch):
    monkeypatch.delenv("SMTP_MODULE_METRICS_PORT", raising=False)
    return load_settings(tmp_path / "missing.ini")


def test_build_handler_applies_settings(settings, buffer_writer):
    settings["default_port"] = 2525
    settings["smtp_timeout"] = 7.0
    handler = build_handler(settings, PackageWriter(buffer_writer))
    assert handler.state.default_port == 2525
    assert handler.dispatcher.timeout == 7.0


def test_build_handler_starts_metrics_exporter(settings, buffer_writer, monkeypatch):
    calls = []
    monkeypatch.setattr(
        "smtp_module.prometheus.start_http_server",
        lambda port, addr, registry: calls.append((port, addr, registry)),
    )
    settings["metrics_port"] = 9108
    settings["metrics_host"] = "0.0.0.0"

    handler = build_handler(settings, PackageWriter(buffer_writer))

    assert calls == [(9108, "0.0.0.0", handler.metrics.registry)]


def test_build_handler_without_metrics_port_serves_nothing(settings, buffer_writer, monkeypatch):
    calls = []
    monkeypatch.setattr("smtp_module.prometheus.start_http_server", lambda *args, **kwargs: calls.append(args))
    build_handler(settings, PackageWriter(buffer_writer))
    assert calls == []


@pytest.mark.asyncio
async def test_serve_end_to_end(settings, buffer_writer, smtp_factory):
    stream = asyncio.StreamReader()
    stream.feed_data(
        encode_frame(0, PackageType.MODULE_CONF, msgpack.packb({"host": "smtp.example.com:587", "auth": ["u", "p"]}))
        + encode_frame(
            41,
            PackageType.MODULE_REQ,
            msgpack.packb({"to": ["a@x.com"], "mail": {"subject": "hi", "plain": "body"}}),
        )
        + encode_frame(42, PackageType.MODULE_REQ, msgpack.packb({"to": [], "mail": {}}))
    )
    stream.feed_eof()

    handler = await asyncio.wait_for(serve(settings, stream, buffer_writer), timeout=5)

    assert handler.shutdown.is_set()
    assert buffer_writer.frames() == [
        (0, PackageType.MODULE_CONF_OK, None),
        (41, PackageType.MODULE_RES, None),
        (42, PackageType.MODULE_ERR, [-53, "missing recipient: 'to' must contain at least one address"]),
    ]
    assert smtp_factory.sent[0]["message"]["Subject"] == "hi"
