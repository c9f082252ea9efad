# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Mail request validation, message assembly and SMTP delivery."""

from __future__ import annotations

import asyncio
from email.message import EmailMessage
from email.utils import formataddr
from typing import Any

import aiosmtplib

from .connection import SmtpConnection
from .errors import NotConfiguredError, RequestValidationError, SendError
from .logger import get_logger
from .models import MailFields, MailRequest

DEFAULT_SMTP_TIMEOUT = 60.0


class MailDispatcher:
    """Validate mail requests and send them over a fresh SMTP session."""

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_SMTP_TIMEOUT,
        logger=None,
        log_delivery_activity: bool = False,
    ):
        self.timeout = timeout
        self.logger = logger or get_logger("smtp.dispatcher")
        self._log_delivery_activity = bool(log_delivery_activity)

    @staticmethod
    def _summarise_addresses(value: Any) -> str:
        """Return a compact textual representation of recipient-like values."""
        if not value:
            return "-"
        preview = ", ".join(str(item).strip() for item in value if item)
        if len(preview) > 200:
            return f"{preview[:197]}..."
        return preview or "-"

    # ------------------------------------------------------------- validations
    @staticmethod
    def validate(request: MailRequest) -> MailFields:
        """Check the business rules in order and return the mail object.

        Recipients are checked first, then the subject of the mail object,
        then the presence of the mail object itself.
        """
        if not any(addr.strip() for addr in request.to):
            raise RequestValidationError(
                "missing recipient: 'to' must contain at least one address",
                code="missing_recipient",
            )
        mail = request.mail
        if mail is not None and not mail.subject:
            raise RequestValidationError("missing subject", code="missing_subject")
        if mail is None:
            raise RequestValidationError("missing mail object", code="missing_mail_object")
        return mail

    # ---------------------------------------------------------------- assembly
    @staticmethod
    def build_message(request: MailRequest, mail: MailFields) -> EmailMessage:
        """Translate a validated request into an :class:`EmailMessage`.

        A display name without a sender address adds no From header. Header
        values containing line breaks raise :class:`RequestValidationError`.
        """
        try:
            return MailDispatcher._assemble(request, mail)
        except ValueError as exc:
            raise RequestValidationError(f"invalid header: {exc}", code="invalid_header") from exc

    @staticmethod
    def _assemble(request: MailRequest, mail: MailFields) -> EmailMessage:
        msg = EmailMessage()
        msg["To"] = ", ".join(addr.strip() for addr in request.to if addr.strip())
        msg["Subject"] = mail.subject
        if mail.bcc:
            msg["Bcc"] = ", ".join(mail.bcc)
        if mail.cc:
            msg["Cc"] = ", ".join(mail.cc)
        if mail.reply_to is not None:
            msg["Reply-To"] = mail.reply_to
        if mail.from_addr is not None:
            msg["From"] = formataddr((mail.from_name or "", mail.from_addr))

        if mail.plain is not None:
            msg.set_content(mail.plain)
            if mail.html is not None:
                msg.add_alternative(mail.html, subtype="html")
        elif mail.html is not None:
            msg.set_content(mail.html, subtype="html")
        return msg

    # ------------------------------------------------------------------- SMTP
    async def send(self, msg: EmailMessage, connection: SmtpConnection, sender: str = "") -> None:
        """Deliver ``msg`` through ``connection``, raising :class:`SendError`."""
        smtp = aiosmtplib.SMTP(
            hostname=connection.hostname,
            port=connection.port,
            use_tls=connection.use_tls,
            start_tls=False if connection.use_tls else None,
            timeout=self.timeout,
        )
        try:
            await smtp.connect()
            try:
                if connection.credentials is not None:
                    await smtp.login(connection.credentials.username, connection.credentials.password)
                await smtp.send_message(msg, sender=sender)
            finally:
                try:
                    await smtp.quit()
                except (aiosmtplib.SMTPException, OSError) as exc:
                    self.logger.debug("Ignoring error while closing SMTP session: %s", exc)
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError, ValueError) as exc:
            raise SendError(f"failed to send mail: {exc}") from exc

    async def dispatch(self, request: MailRequest, connection: SmtpConnection | None) -> None:
        """Validate, assemble and send one mail request."""
        mail = self.validate(request)
        msg = self.build_message(request, mail)
        if connection is None:
            raise NotConfiguredError()
        log = self.logger.info if self._log_delivery_activity else self.logger.debug
        log(
            "Attempting delivery to %s via %s:%d",
            self._summarise_addresses(request.to),
            connection.hostname,
            connection.port,
        )
        await self.send(msg, connection, sender=mail.from_addr or "")
        log("Delivery succeeded to %s", self._summarise_addresses(request.to))
