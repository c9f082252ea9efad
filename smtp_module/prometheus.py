# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Prometheus metrics exposed by the SMTP module."""

from prometheus_client import CollectorRegistry, Counter, Gauge, generate_latest, start_http_server


class ModuleMetrics:
    """Wrapper around the Prometheus registry used by the module."""

    def __init__(self, registry: CollectorRegistry | None = None):
        """Create counters and gauges inside the provided registry."""
        self.registry = registry or CollectorRegistry()
        self.sent = Counter("smtp_module_sent_total", "Total sent emails", registry=self.registry)
        self.errors = Counter(
            "smtp_module_errors_total", "Total failed mail requests", ["kind"], registry=self.registry
        )
        self.configs = Counter(
            "smtp_module_config_total", "Total configuration updates", ["result"], registry=self.registry
        )
        self.configured = Gauge(
            "smtp_module_configured", "Whether an SMTP configuration is active", registry=self.registry
        )

    def inc_sent(self):
        """Increase the ``sent`` counter."""
        self.sent.inc()

    def inc_error(self, kind: str):
        """Increase the ``errors`` counter for the given reply kind."""
        self.errors.labels(kind=kind or "unknown").inc()

    def inc_config(self, ok: bool):
        """Count one configuration update and track the configured flag."""
        self.configs.labels(result="ok" if ok else "error").inc()
        if ok:
            self.configured.set(1)

    def serve(self, port: int, addr: str = "127.0.0.1") -> None:
        """Expose the registry over HTTP on ``addr:port``."""
        start_http_server(port, addr=addr, registry=self.registry)

    def generate_latest(self) -> bytes:
        """Return the latest metrics snapshot in Prometheus text format."""
        return generate_latest(self.registry)
