# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Pydantic models for the payloads received from the host.

Models are strict: a field of the wrong type or an unknown key rejects the
whole payload. Optional fields missing from the payload stay ``None`` so that
an omitted value can be told apart from an explicitly empty one.

Models:
    - ModuleConfig: SMTP host and optional PLAIN credentials
    - MailFields: Subject, sender, bodies and extra recipients of a mail
    - MailRequest: Recipients plus the nested mail object

Wire shape of a request::

    {"to": ["a@example.com"], "mail": {"subject": "hi", "plain": "body"}}
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModuleConfig(BaseModel):
    """Configuration update sent by the host.

    Attributes:
        host: SMTP server as ``hostname[:port]``.
        auth: Optional ``[username, password]`` pair.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    host: Annotated[
        str,
        Field(description="SMTP server, hostname[:port]")
    ]
    auth: Annotated[
        list[str] | None,
        Field(default=None, description="Username and password for PLAIN auth")
    ]


class MailFields(BaseModel):
    """Nested mail object of a request.

    Attributes:
        subject: Mail subject (required by the dispatcher, not by the schema).
        from_addr: Sender address, ``from`` on the wire.
        from_name: Display name used with the sender address.
        reply_to: Reply-To address.
        plain: Plain text body.
        html: HTML body.
        cc: CC addresses.
        bcc: BCC addresses.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    subject: Annotated[
        str | None,
        Field(default=None, description="Mail subject")
    ]
    from_addr: Annotated[
        str | None,
        Field(default=None, alias="from", description="Sender address")
    ]
    from_name: Annotated[
        str | None,
        Field(default=None, description="Sender display name")
    ]
    reply_to: Annotated[
        str | None,
        Field(default=None, description="Reply-To address")
    ]
    plain: Annotated[
        str | None,
        Field(default=None, description="Plain text body")
    ]
    html: Annotated[
        str | None,
        Field(default=None, description="HTML body")
    ]
    cc: Annotated[
        list[str] | None,
        Field(default=None, description="CC addresses")
    ]
    bcc: Annotated[
        list[str] | None,
        Field(default=None, description="BCC addresses")
    ]


class MailRequest(BaseModel):
    """Send mail request.

    Attributes:
        to: Recipient addresses; duplicates are dropped, order is kept.
        mail: Nested mail object, ``None`` when the caller omitted it.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    to: Annotated[
        list[str],
        Field(default_factory=list, description="Recipient addresses")
    ]
    mail: Annotated[
        MailFields | None,
        Field(default=None, description="Mail object")
    ]

    @field_validator("to")
    @classmethod
    def unique_recipients(cls, v: list[str]) -> list[str]:
        """Drop repeated addresses."""
        return list(dict.fromkeys(v))
