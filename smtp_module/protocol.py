# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Package envelope and reply types of the host module protocol.

Every frame starts with an 8 byte little endian header::

    uint32 size | uint16 pid | uint8 tp | uint8 check

where ``check`` is ``tp ^ 0xFF``, followed by ``size`` bytes of msgpack
payload. ``pid`` is the correlation id the host uses to match a reply to its
caller.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

HEADER = struct.Struct("<IHBB")
HEADER_SIZE = HEADER.size


class PackageType(IntEnum):
    """Package type discriminants used by the host."""

    MODULE_CONF = 64
    MODULE_CONF_OK = 65
    MODULE_CONF_ERR = 66
    MODULE_REQ = 80
    MODULE_RES = 81
    MODULE_ERR = 82


class ExceptionKind(IntEnum):
    """Exception codes understood by the host in module error replies."""

    OPERATION_FAILED = -63
    BAD_DATA = -53


@dataclass(frozen=True)
class Package:
    """One inbound frame: correlation id, raw type and payload."""

    pid: int
    tp: int
    data: bytes = b""

    @property
    def kind(self) -> PackageType | None:
        """Return the known package type, or ``None`` for unknown ones."""
        try:
            return PackageType(self.tp)
        except ValueError:
            return None


@dataclass(frozen=True)
class ConfigAck:
    pass


@dataclass(frozen=True)
class ConfigNack:
    pass


@dataclass(frozen=True)
class Response:
    pid: int
    value: Any = None


@dataclass(frozen=True)
class ExceptionReply:
    pid: int
    kind: ExceptionKind
    message: str


Reply = Union[ConfigAck, ConfigNack, Response, ExceptionReply]


def encode_frame(pid: int, tp: int, data: bytes = b"") -> bytes:
    """Return header and payload of one outbound frame."""
    return HEADER.pack(len(data), pid, tp, tp ^ 0xFF) + data


def decode_header(header: bytes) -> tuple[int, int, int, int]:
    """Unpack a frame header into ``(size, pid, tp, check)``."""
    return HEADER.unpack(header)
