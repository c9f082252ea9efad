# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line entry point of the SMTP module.

Usage:
    smtp-module
    smtp-module --config /etc/smtp-module.ini --log-level DEBUG

The host database spawns the command and talks to it over stdin/stdout;
logging goes to stderr.
"""

from __future__ import annotations

import asyncio

import click

from .logger import configure_logging
from .module import run_module
from .settings import load_settings


@click.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="INI file with module settings (default: $SMTP_MODULE_CONFIG or config.ini).")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Override the configured log level.")
@click.option("--metrics-port", type=int, default=None, help="Expose Prometheus metrics on this port.")
def main(config_path: str | None, log_level: str | None, metrics_port: int | None) -> None:
    """Run the SMTP module until the host closes the package stream."""
    settings = load_settings(config_path)
    if log_level:
        settings["log_level"] = log_level.upper()
    if metrics_port is not None:
        settings["metrics_port"] = metrics_port
    configure_logging(str(settings["log_level"]))
    asyncio.run(run_module(settings))


if __name__ == "__main__":
    main()
