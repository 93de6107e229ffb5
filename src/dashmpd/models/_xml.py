#!/usr/bin/python3

"""
Maps msgspec structs onto XML elements.

Each struct field becomes an attribute, a single child element, a list of child elements,
or the element's character data, depending on its annotation.  XML names are the fields'
encoded names (camelCase unless overridden with msgspec.field(name=...)).
"""

import datetime
import enum
import functools
import math
import types
import typing
import xml.etree.ElementTree as ElementTree
from typing import Annotated, Any, ClassVar, NamedTuple, Self, TypeVar

import msgspec

from ..errors import ERR_MSG_INVALID_ATTRIBUTE, MPDDecodeError, MPDError
from ..util.conditional import (
    ConditionalValue,
    format_conditional_uint,
    parse_conditional_uint,
)
from ..util.duration import Duration, format_duration, parse_duration

_UINT64_MAX = (1 << 64) - 1

# msgspec.Meta bounds must fit in an int64; the uint64 ceiling is checked in _parse_attribute
UInt = Annotated[int, msgspec.Meta(ge=0)]


class XMLStruct(msgspec.Struct, kw_only=True, rename="camel"):
    # name of the field that holds the element's character data, if any
    xml_text_field: ClassVar[str | None] = None

    @classmethod
    def from_element(cls, elem: ElementTree.Element) -> Self:
        return decode_element(cls, elem)

    def to_element(self, tag: str) -> ElementTree.Element:
        return encode_element(self, tag)


T = TypeVar("T", bound=XMLStruct)


class _FieldKind(enum.Enum):
    ATTRIBUTE = enum.auto()
    CONDITIONAL_ATTRIBUTE = enum.auto()
    TEXT = enum.auto()
    CHILD = enum.auto()
    CHILDREN = enum.auto()


class _XMLField(NamedTuple):
    name: str
    xml_name: str
    kind: _FieldKind

    # field type with any optional wrapper removed; element type for CHILDREN
    type: Any


def _is_struct(t: Any) -> bool:
    return isinstance(t, type) and issubclass(t, msgspec.Struct)


def _unwrap_optional(t: Any) -> Any:
    if typing.get_origin(t) not in (typing.Union, types.UnionType):
        return t
    args = tuple(a for a in typing.get_args(t) if a is not types.NoneType)
    if len(args) == 1:
        return args[0]
    return typing.Union[args]


def _is_conditional(t: Any) -> bool:
    if typing.get_origin(t) not in (typing.Union, types.UnionType):
        return False
    return all(
        isinstance(a, type) and issubclass(a, ConditionalValue) for a in typing.get_args(t)
    )


@functools.cache
def _xml_fields(cls: type[XMLStruct]) -> tuple[_XMLField, ...]:
    result = []
    for field in msgspec.structs.fields(cls):
        t = _unwrap_optional(field.type)
        if field.name == cls.xml_text_field:
            kind = _FieldKind.TEXT
        elif _is_conditional(t):
            kind = _FieldKind.CONDITIONAL_ATTRIBUTE
        elif typing.get_origin(t) is list and _is_struct(typing.get_args(t)[0]):
            kind = _FieldKind.CHILDREN
            (t,) = typing.get_args(t)
        elif _is_struct(t):
            kind = _FieldKind.CHILD
        else:
            kind = _FieldKind.ATTRIBUTE
        result.append(_XMLField(field.name, field.encode_name, kind, t))
    return tuple(result)


def local_name(tag: str) -> str:
    # strips the '{namespace}' prefix ElementTree adds to qualified names
    _, _, name = tag.rpartition("}")
    return name


def _format_attribute(t: Any, value: Any) -> str:
    if t is Duration:
        return format_duration(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime.datetime):
        # RFC 3339, with 'Z' for UTC
        return msgspec.to_builtins(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        text = repr(value)
        return text.removesuffix(".0")
    return str(value)


def _parse_attribute(t: Any, text: str) -> Any:
    if t is Duration:
        return parse_duration(text)
    # strict=False permits the numeric and boolean types to be read from strings
    value = msgspec.convert(text, type=t, strict=False)
    if t == UInt and value > _UINT64_MAX:
        raise msgspec.ValidationError(f"Expected `int` <= {_UINT64_MAX}")
    return value


def encode_element(obj: XMLStruct, tag: str) -> ElementTree.Element:
    elem = ElementTree.Element(tag)
    for field in _xml_fields(type(obj)):
        value = getattr(obj, field.name)
        match field.kind:
            case _FieldKind.ATTRIBUTE if value is not None:
                elem.set(field.xml_name, _format_attribute(field.type, value))
            case _FieldKind.CONDITIONAL_ATTRIBUTE:
                text = format_conditional_uint(value)
                if text is not None:
                    elem.set(field.xml_name, text)
            case _FieldKind.TEXT if value:
                elem.text = value
            case _FieldKind.CHILD if value is not None:
                elem.append(encode_element(value, field.xml_name))
            case _FieldKind.CHILDREN:
                for item in value:
                    elem.append(encode_element(item, field.xml_name))
    return elem


def decode_element(cls: type[T], elem: ElementTree.Element) -> T:
    kwargs: dict[str, Any] = {}
    for field in _xml_fields(cls):
        match field.kind:
            case _FieldKind.ATTRIBUTE | _FieldKind.CONDITIONAL_ATTRIBUTE:
                text = elem.get(field.xml_name)
                if text is None:
                    # absent attributes keep the field default
                    continue
                try:
                    if field.kind is _FieldKind.CONDITIONAL_ATTRIBUTE:
                        kwargs[field.name] = parse_conditional_uint(text)
                    else:
                        kwargs[field.name] = _parse_attribute(field.type, text)
                except MPDError as exc:
                    raise _attribute_error(elem, field, exc, exc.internal()) from exc
                except (ValueError, TypeError) as exc:
                    # msgspec.ValidationError, or a type msgspec cannot convert to
                    raise _attribute_error(elem, field, exc, f"{text!r}: {exc}") from exc
            case _FieldKind.TEXT:
                kwargs[field.name] = elem.text or ""
            case _FieldKind.CHILD:
                child = elem.find(f"{{*}}{field.xml_name}")
                if child is not None:
                    kwargs[field.name] = decode_element(field.type, child)
            case _FieldKind.CHILDREN:
                kwargs[field.name] = [
                    decode_element(field.type, child)
                    for child in elem.findall(f"{{*}}{field.xml_name}")
                ]
    return cls(**kwargs)


def _attribute_error(
    elem: ElementTree.Element, field: _XMLField, exc: Exception, detail: str
) -> MPDDecodeError:
    tag = local_name(elem.tag)
    return MPDDecodeError(
        ERR_MSG_INVALID_ATTRIBUTE,
        f"{tag}@{field.xml_name}: {detail}",
        exc,
        tag=tag,
        attribute=field.xml_name,
    )
