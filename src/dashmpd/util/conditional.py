#!/usr/bin/python3

"""
ConditionalUintType attributes, defined by the MPD schema as a union of unsignedInt and
boolean.  An attribute that is not present is treated as 'false' by consumers.
"""

from typing import Annotated

import msgspec

from ..errors import MalformedConditionalUnit

_UINT64_MAX = (1 << 64) - 1


class ConditionalValue(msgspec.Struct, frozen=True, tag=True):
    pass


class ConditionalUintValue(ConditionalValue, tag="uint"):
    # msgspec.Meta bounds must fit in an int64; the uint64 ceiling is checked when formatting
    value: Annotated[int, msgspec.Meta(ge=0)]


class ConditionalBoolValue(ConditionalValue, tag="bool"):
    value: bool


# None is the 'attribute absent' case
ConditionalUint = ConditionalUintValue | ConditionalBoolValue | None


def format_conditional_uint(v: ConditionalUint) -> str | None:
    # returns None if the attribute should be omitted entirely
    match v:
        case ConditionalUintValue(value=n):
            if not 0 <= n <= _UINT64_MAX:
                raise ValueError(f"Conditional unit value {n} is not a 64-bit unsigned integer")
            return str(n)
        case ConditionalBoolValue(value=b):
            return "true" if b else "false"
        case None:
            return None
    raise TypeError(f"Unknown conditional unit value {v!r}")


def parse_conditional_uint(text: str) -> ConditionalUintValue | ConditionalBoolValue:
    if text.isascii() and text.isdigit():
        significant = text.lstrip("0") or "0"
        if len(significant) <= len(str(_UINT64_MAX)) and int(significant) <= _UINT64_MAX:
            return ConditionalUintValue(int(significant))
    elif text in ("true", "false"):
        return ConditionalBoolValue(text == "true")
    raise MalformedConditionalUnit(text)
