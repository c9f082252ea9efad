# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""msgpack payload codec."""

from __future__ import annotations

from typing import Any, TypeVar

import msgpack
from pydantic import BaseModel, ValidationError

from .errors import DecodeError

ModelT = TypeVar("ModelT", bound=BaseModel)


def unpack(data: bytes) -> Any:
    """Unpack one msgpack value, raising :class:`DecodeError` on bad input."""
    try:
        return msgpack.unpackb(data, raw=False)
    except (ValueError, msgpack.exceptions.UnpackException) as exc:
        raise DecodeError(f"invalid msgpack payload: {exc}") from exc


def decode(data: bytes, model: type[ModelT]) -> ModelT:
    """Unpack ``data`` and validate it against ``model``."""
    value = unpack(data)
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        )
        raise DecodeError(f"invalid {model.__name__}: {errors}") from exc


def pack(value: Any) -> bytes:
    """Serialize an outbound payload."""
    return msgpack.packb(value, use_bin_type=True)
