"""
Runtime type descriptors for fact fields and method parameters.

Kinds are compared instead of concrete classes so that a rule can pass any
string to a ``str`` parameter, any list to a ``list[int]`` field, and anything
at all where the declaration is generic (missing annotation, ``Any``,
``object``, unions).
"""

from __future__ import annotations

import collections.abc
import inspect
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Kind(str, Enum):
    """Runtime kinds a value or declaration can resolve to."""

    NONE = "none"
    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BYTES = "bytes"
    SLICE = "slice"
    MAP = "map"
    STRUCT = "struct"
    FUNC = "func"
    INTERFACE = "interface"


# Checked in order: bool before int.
_BUILTIN_KINDS: tuple[tuple[type, Kind], ...] = (
    (bool, Kind.BOOL),
    (int, Kind.INTEGER),
    (float, Kind.FLOAT),
    (str, Kind.STRING),
    ((bytes, bytearray), Kind.BYTES),
    ((list, tuple, set, frozenset), Kind.SLICE),
    (collections.abc.Mapping, Kind.MAP),
)

_UNION_ORIGINS = (typing.Union, types.UnionType)


def kind_of_value(value: Any) -> Kind:
    """Return the runtime kind of a live value."""
    if value is None:
        return Kind.NONE
    for cls, kind in _BUILTIN_KINDS:
        if isinstance(value, cls):
            return kind
    if inspect.isroutine(value) or isinstance(value, type):
        return Kind.FUNC
    return Kind.STRUCT


def kind_of_annotation(annotation: Any) -> Kind:
    """Return the kind declared by a type annotation."""
    if annotation is None or annotation is type(None):
        return Kind.NONE
    if annotation in (inspect.Parameter.empty, Any, object):
        return Kind.INTERFACE
    if isinstance(annotation, (str, typing.TypeVar)):
        return Kind.INTERFACE

    origin = typing.get_origin(annotation)
    if origin in _UNION_ORIGINS:
        return Kind.INTERFACE
    if origin is not None:
        annotation = origin
    if not isinstance(annotation, type):
        return Kind.INTERFACE

    for cls, kind in _BUILTIN_KINDS:
        if issubclass(annotation, cls):
            return kind
    if issubclass(annotation, (collections.abc.Sequence, collections.abc.Set)):
        return Kind.SLICE
    if annotation is collections.abc.Callable:
        return Kind.FUNC
    return Kind.STRUCT


@dataclass(frozen=True)
class TypeDescriptor:
    """Declared or observed type of a field, parameter or fact."""

    kind: Kind
    python_type: Any

    @property
    def name(self) -> str:
        """Readable type name used in error messages."""
        if isinstance(self.python_type, type) and typing.get_origin(self.python_type) is None:
            return self.python_type.__name__
        return str(self.python_type)

    def accepts(self, value: Any) -> bool:
        """Check whether ``value`` may be assigned or passed where this type is declared."""
        if self.kind is Kind.INTERFACE:
            if typing.get_origin(self.python_type) in _UNION_ORIGINS:
                return any(
                    descriptor_for_annotation(member).accepts(value)
                    for member in typing.get_args(self.python_type)
                )
            return True

        if self.kind is Kind.STRUCT:
            cls = typing.get_origin(self.python_type) or self.python_type
            if isinstance(cls, type):
                return isinstance(value, cls)

        return kind_of_value(value) is self.kind


def descriptor_for_value(value: Any) -> TypeDescriptor:
    """Describe a live value by its runtime class."""
    return TypeDescriptor(kind=kind_of_value(value), python_type=type(value))


def descriptor_for_annotation(annotation: Any) -> TypeDescriptor:
    """Describe a declared annotation."""
    if annotation is None:
        annotation = type(None)
    return TypeDescriptor(kind=kind_of_annotation(annotation), python_type=annotation)
