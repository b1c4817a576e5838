"""Exceptions raised by the fact store, path resolver and rule engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rulekit.runtime.engine import ExecutionResult


class RuleKitError(Exception):
    """Base exception for all engine failures."""


# =============================================================================
# Fact Store
# =============================================================================


class FactError(RuleKitError):
    """Raised when a fact cannot be stored or addressed."""


class InvalidFactKindError(FactError):
    """Raised when a value that is not a mutable object is added as a fact."""


class FactNotFoundError(FactError):
    """Raised when a path addresses a fact name that was never added."""

    def __init__(self, name: str, operation: str):
        self.name = name
        super().__init__(f"fact [{name}] not found while {operation}")


class FactRetractedError(FactError):
    """Raised when a path addresses a retracted fact."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"fact [{name}] is retracted")


# =============================================================================
# Path Resolver
# =============================================================================


class ResolutionError(RuleKitError):
    """Raised when a path cannot be followed on a fact object."""


class AttributeNotFoundError(ResolutionError):
    """Raised when a path segment does not name an accessible field or method."""

    def __init__(self, owner: str, name: str):
        self.owner = owner
        self.attribute = name
        super().__init__(f"{owner} has no accessible attribute [{name}]")


class TypeMismatchError(ResolutionError):
    """Raised when a value is not assignable to the target field."""


class NoPathSpecifiedError(ResolutionError):
    """Raised when a field or method name is required but the path is empty."""


class ArgumentCountMismatchError(ResolutionError):
    """Raised when a non-variadic method gets the wrong number of arguments."""


class ArgumentTypeMismatchError(ResolutionError):
    """Raised when an argument kind does not match the declared parameter kind."""


class UnsupportedMultiReturnError(ResolutionError):
    """Raised when an invoked method returns more than one value."""


# =============================================================================
# Rules and execution
# =============================================================================


class RuleError(RuleKitError):
    """Raised when a rule fails while being evaluated or fired."""

    def __init__(self, rule_name: str, message: str):
        self.rule_name = rule_name
        super().__init__(message)


class RuleEvaluationError(RuleError):
    """Raised when a rule condition fails or does not produce a boolean."""


class RuleExecutionError(RuleError):
    """Raised when one of a rule's actions fails."""


class CycleExceededError(RuleKitError):
    """Raised when execution stops only because the cycle budget was used up.

    The partial ``ExecutionResult`` is kept on the exception so callers can
    treat the condition as a warning.
    """

    def __init__(self, result: ExecutionResult):
        self.result = result
        super().__init__(
            f"knowledge base [{result.knowledge_base}] still had rules to fire "
            f"after {result.cycles} cycles. Rules whose condition stays true "
            "without changing any fact keep matching; retract them or adjust max_cycle"
        )
