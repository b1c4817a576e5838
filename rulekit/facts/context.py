"""
Data context holding the facts of one rule execution.

Facts are caller-owned objects registered under a name. Rules address them
with dotted paths (``User.address.city``, ``User.set_name``); the first segment
names the fact and the rest is resolved by ``rulekit.facts.resolver``.

Besides the bindings the context tracks:
- a retraction set of names hidden from evaluation (facts or rule names)
- a count of successful field writes, used by the engine to detect a fixpoint
- a completion flag that tells the engine to stop after the current cycle
"""

from __future__ import annotations

import dataclasses
import inspect
from enum import Enum
from typing import Any, Sequence

from pydantic import BaseModel

from rulekit.core.errors import FactNotFoundError, FactRetractedError, InvalidFactKindError
from rulekit.core.log import get_logger
from rulekit.facts.resolver import trace_method, trace_set_value, trace_type, trace_value
from rulekit.facts.types import TypeDescriptor

logger = get_logger(__name__)

# Values with no assignable fields, or copied on every use.
_VALUE_TYPES = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    bytearray,
    tuple,
    list,
    dict,
    set,
    frozenset,
    range,
    Enum,
)


def _is_mutable_object(obj: Any) -> bool:
    """Check whether ``obj`` is an object whose fields can be written in place."""
    if obj is None or isinstance(obj, _VALUE_TYPES):
        return False
    if isinstance(obj, type) or inspect.isroutine(obj) or inspect.ismodule(obj):
        return False
    if dataclasses.is_dataclass(obj) and obj.__dataclass_params__.frozen:
        return False
    if isinstance(obj, BaseModel) and obj.model_config.get("frozen"):
        return False
    return hasattr(obj, "__dict__") or hasattr(type(obj), "__slots__")


class DataContext:
    """Fact store for a single rule execution.

    Not thread-safe: one context is driven by one engine at a time.
    """

    def __init__(self) -> None:
        self._facts: dict[str, Any] = {}
        self._retracted: dict[str, None] = {}
        self._variable_change_count = 0
        self._complete = False

    # -------------------------------------------------------------------------
    # Bindings
    # -------------------------------------------------------------------------

    def add(self, name: str, obj: Any) -> None:
        """Register ``obj`` as fact ``name``, replacing any previous binding.

        Args:
            name: Fact name, the first segment of every path addressing it
            obj: Mutable object owned by the caller

        Raises:
            InvalidFactKindError: If ``obj`` is a scalar, container or frozen object
            ValueError: If ``name`` is empty or contains a dot
        """
        if not name or "." in name:
            raise ValueError(f"invalid fact name: {name!r}")
        if not _is_mutable_object(obj):
            raise InvalidFactKindError(
                f"only mutable objects can be added as facts, got {type(obj).__name__}"
            )
        self._facts[name] = obj

    def facts(self) -> dict[str, Any]:
        """Return a copy of the name to object bindings."""
        return dict(self._facts)

    def __contains__(self, name: object) -> bool:
        return name in self._facts

    # -------------------------------------------------------------------------
    # Retraction
    # -------------------------------------------------------------------------

    def retract(self, name: str) -> None:
        """Hide ``name`` from evaluation and modification until ``reset()``."""
        logger.debug("retracting %s", name)
        self._retracted[name] = None

    def is_retracted(self, name: str) -> bool:
        """Check if ``name`` is currently retracted."""
        return name in self._retracted

    def retracted(self) -> list[str]:
        """Return retracted names in retraction order."""
        return list(self._retracted)

    def reset(self) -> None:
        """Un-retract every name."""
        self._retracted.clear()

    # -------------------------------------------------------------------------
    # Change tracking and completion
    # -------------------------------------------------------------------------

    @property
    def variable_change_count(self) -> int:
        """Successful field writes since the last reset of the counter."""
        return self._variable_change_count

    def reset_variable_change_count(self) -> None:
        self._variable_change_count = 0

    def increment_variable_change_count(self) -> None:
        self._variable_change_count += 1

    def has_variable_change(self) -> bool:
        return self._variable_change_count > 0

    def complete(self) -> None:
        """Tell the engine to stop once the current cycle is done."""
        self._complete = True

    def is_complete(self) -> bool:
        return self._complete

    def reset_all_fields_zero(self) -> None:
        """Drop every binding and all execution state so the context can be reused."""
        self._facts = {}
        self._retracted = {}
        self._variable_change_count = 0
        self._complete = False

    # -------------------------------------------------------------------------
    # Path operations
    # -------------------------------------------------------------------------

    def _resolve_fact(self, path: str, operation: str) -> tuple[Any, list[str]]:
        """Split ``path`` on its first segment and return the bound fact and the remainder."""
        name, *remainder = path.split(".")
        if name not in self._facts:
            raise FactNotFoundError(name, operation)
        if self.is_retracted(name):
            raise FactRetractedError(name)
        return self._facts[name], remainder

    def get_type(self, path: str) -> TypeDescriptor:
        """Return the type of the value addressed by ``path``."""
        obj, remainder = self._resolve_fact(path, "obtaining type")
        return trace_type(obj, remainder)

    def get_value(self, path: str) -> Any:
        """Return the live value addressed by ``path``."""
        obj, remainder = self._resolve_fact(path, "retrieving value")
        return trace_value(obj, remainder)

    def set_value(self, path: str, value: Any) -> None:
        """Assign ``value`` to the field addressed by ``path``.

        Counts as a variable change only when the assignment succeeds.
        """
        obj, remainder = self._resolve_fact(path, "setting value")
        trace_set_value(obj, remainder, value)
        self._variable_change_count += 1

    def exec_method(self, path: str, args: Sequence[Any] = ()) -> Any:
        """Invoke the method addressed by ``path`` with ``args``."""
        obj, remainder = self._resolve_fact(path, "executing method")
        return trace_method(obj, remainder, args)


def new_data_context() -> DataContext:
    """Create an empty data context."""
    return DataContext()
