"""
Path resolution on fact objects.

Stateless helpers used by the data context to read fields, write fields and
invoke methods along a dotted path. Each ``trace_*`` function consumes one
path segment per step and recurses on the value it resolved, so an N-segment
path performs N single-step resolutions. Methods are only allowed as the last
segment.

Accessibility rules:
- names starting with ``_`` are never reachable
- methods are not fields, and a field holding a callable is not a method

Annotations are resolved one name at a time: a name that cannot be resolved
(typically one imported only under ``TYPE_CHECKING``) is unknown on its own
and does not disable the checks on its siblings.
"""

from __future__ import annotations

import inspect
import sys
import typing
from dataclasses import dataclass
from typing import Any, Sequence

from rulekit.core.errors import (
    ArgumentCountMismatchError,
    ArgumentTypeMismatchError,
    AttributeNotFoundError,
    NoPathSpecifiedError,
    ResolutionError,
    TypeMismatchError,
    UnsupportedMultiReturnError,
)
from rulekit.facts.types import (
    TypeDescriptor,
    descriptor_for_annotation,
    descriptor_for_value,
    kind_of_value,
)


# =============================================================================
# Introspection helpers
# =============================================================================


def _owner_name(obj: Any) -> str:
    return type(obj).__name__


# Marks an annotation that names something not importable at runtime.
_UNRESOLVED = object()


def _own_annotations(target: Any) -> dict[str, Any]:
    try:
        return dict(inspect.get_annotations(target))
    except NameError:
        return {}


def _annotation_scopes(target: Any):
    """Yield ``(annotations, globalns, localns)`` for a class and its bases, or a callable."""
    if isinstance(target, type):
        for base in reversed(target.__mro__):
            module = sys.modules.get(base.__module__)
            yield _own_annotations(base), getattr(module, "__dict__", {}), dict(vars(base))
    else:
        func = inspect.unwrap(getattr(target, "__func__", target))
        yield _own_annotations(func), getattr(func, "__globals__", {}), None


def _resolve_annotation(annotation: Any, globalns: dict[str, Any], localns: Any) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, globalns, localns)
    except (NameError, AttributeError, SyntaxError, TypeError):
        return _UNRESOLVED


def _type_hints(target: Any) -> dict[str, Any]:
    """Resolved annotations of a class or callable.

    Names whose annotation cannot be resolved map to ``_UNRESOLVED``.
    """
    try:
        return typing.get_type_hints(target)
    except (NameError, AttributeError, SyntaxError, TypeError):
        pass

    hints: dict[str, Any] = {}
    for annotations, globalns, localns in _annotation_scopes(target):
        for name, annotation in annotations.items():
            hints[name] = _resolve_annotation(annotation, globalns, localns)
    return hints


def _is_method(obj: Any, name: str) -> bool:
    """Check whether ``name`` is defined as a method on the object's class."""
    try:
        static = inspect.getattr_static(type(obj), name)
    except AttributeError:
        return False
    return isinstance(static, (staticmethod, classmethod)) or inspect.isroutine(static)


def _lookup(obj: Any, name: str) -> Any:
    if not name or name.startswith("_"):
        raise AttributeNotFoundError(_owner_name(obj), name)
    try:
        return getattr(obj, name)
    except AttributeError as err:
        raise AttributeNotFoundError(_owner_name(obj), name) from err


@dataclass(frozen=True)
class _MethodSignature:
    """Callable plus the declared shape of its positional parameters."""

    method: Any
    parameters: list[TypeDescriptor]
    required: int
    variadic: bool
    returns: Any
    keyword_required: list[str]

    @property
    def fixed(self) -> int:
        """Number of positional parameters excluding ``*args``."""
        return len(self.parameters) - (1 if self.variadic else 0)


def _inspect_method(obj: Any, name: str) -> _MethodSignature:
    method = _lookup(obj, name)
    if not _is_method(obj, name) or not callable(method):
        raise AttributeNotFoundError(_owner_name(obj), f"{name}()")

    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError) as err:
        raise ResolutionError(
            f"cannot inspect parameters of {_owner_name(obj)}.{name}(): {err}"
        ) from err

    hints = _type_hints(method)
    parameters: list[TypeDescriptor] = []
    required = 0
    variadic = False
    keyword_required: list[str] = []
    for param in signature.parameters.values():
        annotation = hints.get(param.name, param.annotation)
        if annotation is _UNRESOLVED:
            annotation = Any
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            parameters.append(descriptor_for_annotation(annotation))
            if param.default is param.empty:
                required += 1
        elif param.kind is param.VAR_POSITIONAL:
            parameters.append(descriptor_for_annotation(annotation))
            variadic = True
        elif param.kind is param.KEYWORD_ONLY and param.default is param.empty:
            keyword_required.append(param.name)

    return _MethodSignature(
        method=method,
        parameters=parameters,
        required=required,
        variadic=variadic,
        returns=hints.get("return", signature.return_annotation),
        keyword_required=keyword_required,
    )


def _is_multi_return(annotation: Any) -> bool:
    """A fixed-length tuple of more than one element declares several return values."""
    if typing.get_origin(annotation) is not tuple:
        return False
    members = typing.get_args(annotation)
    return len(members) > 1 and Ellipsis not in members


# =============================================================================
# Single-step operations
# =============================================================================


def get_attribute_value(obj: Any, name: str) -> Any:
    """Return the live value of field ``name`` on ``obj``."""
    if _is_method(obj, name):
        raise AttributeNotFoundError(_owner_name(obj), name)
    return _lookup(obj, name)


def get_attribute_type(obj: Any, name: str) -> TypeDescriptor:
    """Return the declared type of field ``name``, or the type of its current value."""
    value = get_attribute_value(obj, name)
    annotation = _type_hints(type(obj)).get(name, _UNRESOLVED)
    if annotation is not _UNRESOLVED:
        return descriptor_for_annotation(annotation)
    return descriptor_for_value(value)


def set_attribute_value(obj: Any, name: str, value: Any) -> None:
    """Assign ``value`` to field ``name`` after checking it is assignable."""
    current = get_attribute_value(obj, name)
    annotation = _type_hints(type(obj)).get(name, _UNRESOLVED)

    descriptor: TypeDescriptor | None
    if annotation is not _UNRESOLVED:
        descriptor = descriptor_for_annotation(annotation)
    elif current is None:
        # Untyped (or unresolvable) and unset: nothing to check against.
        descriptor = None
    else:
        descriptor = descriptor_for_value(current)

    if descriptor is not None and not descriptor.accepts(value):
        raise TypeMismatchError(
            f"can not assign {type(value).__name__} to {_owner_name(obj)}.{name} "
            f"of type {descriptor.name}"
        )

    try:
        setattr(obj, name, value)
    except (AttributeError, TypeError, ValueError) as err:
        raise TypeMismatchError(
            f"{_owner_name(obj)}.{name} rejected the assignment: {err}"
        ) from err


def get_function_parameter_types(obj: Any, name: str) -> tuple[list[TypeDescriptor], bool]:
    """Return positional parameter types of method ``name`` and whether it is variadic.

    For a variadic method the last descriptor is the element type of ``*args``.
    """
    signature = _inspect_method(obj, name)
    return list(signature.parameters), signature.variadic


def invoke_function(obj: Any, name: str, args: Sequence[Any]) -> Any:
    """Call method ``name`` on ``obj`` without any argument checks."""
    method = _lookup(obj, name)
    if not _is_method(obj, name) or not callable(method):
        raise AttributeNotFoundError(_owner_name(obj), f"{name}()")
    return method(*args)


# =============================================================================
# Path operations
# =============================================================================


def trace_type(obj: Any, path: Sequence[str]) -> TypeDescriptor:
    """Resolve the type at the end of ``path``, or of ``obj`` itself for an empty path."""
    if not path:
        return descriptor_for_value(obj)
    if len(path) == 1:
        return get_attribute_type(obj, path[0])
    return trace_type(get_attribute_value(obj, path[0]), path[1:])


def trace_value(obj: Any, path: Sequence[str]) -> Any:
    """Resolve the live value at the end of ``path``, or ``obj`` itself for an empty path."""
    if not path:
        return obj
    if len(path) == 1:
        return get_attribute_value(obj, path[0])
    return trace_value(get_attribute_value(obj, path[0]), path[1:])


def trace_set_value(obj: Any, path: Sequence[str], value: Any) -> None:
    """Assign ``value`` to the field at the end of ``path``."""
    if not path:
        raise NoPathSpecifiedError("no attribute path specified")
    if len(path) == 1:
        set_attribute_value(obj, path[0], value)
        return
    trace_set_value(get_attribute_value(obj, path[0]), path[1:], value)


def trace_method(obj: Any, path: Sequence[str], args: Sequence[Any]) -> Any:
    """Invoke the method named by the last segment of ``path`` with checked arguments.

    Args:
        obj: Object the path starts from
        path: Field segments followed by the method name
        args: Positional arguments for the call

    Returns:
        The method's single return value, or None when it returns nothing

    Raises:
        NoPathSpecifiedError: If ``path`` is empty
        ArgumentCountMismatchError: If the argument count does not fit the signature
        ArgumentTypeMismatchError: If an argument kind does not fit its parameter
        UnsupportedMultiReturnError: If the method returns several values
    """
    if not path:
        raise NoPathSpecifiedError("no function path specified")
    if len(path) > 1:
        return trace_method(get_attribute_value(obj, path[0]), path[1:], args)

    name = path[0]
    signature = _inspect_method(obj, name)
    fixed = signature.fixed

    if signature.keyword_required:
        raise ArgumentCountMismatchError(
            f"invalid argument count for function {name}(). "
            f"keyword-only arguments {', '.join(signature.keyword_required)} can not be passed"
        )

    if len(args) < signature.required or (not signature.variadic and len(args) > fixed):
        raise ArgumentCountMismatchError(
            f"invalid argument count for function {name}(). "
            f"need {fixed} argument while there are {len(args)}"
        )

    for index, (param, arg) in enumerate(zip(signature.parameters[:fixed], args)):
        if not param.accepts(arg):
            raise ArgumentTypeMismatchError(
                f"invalid argument types for function {name}(). argument #{index}, "
                f"require {param.kind.value} but {kind_of_value(arg).value}"
            )

    if signature.variadic:
        element = signature.parameters[-1]
        for index in range(fixed, len(args)):
            if not element.accepts(args[index]):
                raise ArgumentTypeMismatchError(
                    f"invalid variadic argument types for function {name}(). argument #{index}, "
                    f"require {element.kind.value} but {kind_of_value(args[index]).value}"
                )

    result = invoke_function(obj, name, args)
    if isinstance(result, tuple) and _is_multi_return(signature.returns):
        raise UnsupportedMultiReturnError(f"multiple return value for function {name}()")
    return result
