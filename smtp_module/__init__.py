# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP sending module for a host database process.

The module runs as a long-lived worker spawned by the host. It reads framed
packages from stdin, applies SMTP configuration updates, sends mail on request
and writes exactly one correlated reply per package to stdout.

- Configuration handshake (host, optional PLAIN auth pair)
- Mail requests validated with pydantic and sent through aiosmtplib
- Typed error replies that keep the worker alive
- Prometheus counters for sent mails, failures and configuration updates

Example:
    Running the module from Python::

        import asyncio

        from smtp_module.module import run_module
        from smtp_module.settings import load_settings

        asyncio.run(run_module(load_settings()))
"""

MODULE_NAME = "smtp"

__version__ = "0.1.0"
