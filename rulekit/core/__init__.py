"""Core domain - configuration, errors and logging."""

from rulekit.core.config import Settings, get_settings
from rulekit.core.errors import (
    ArgumentCountMismatchError,
    ArgumentTypeMismatchError,
    AttributeNotFoundError,
    CycleExceededError,
    FactError,
    FactNotFoundError,
    FactRetractedError,
    InvalidFactKindError,
    NoPathSpecifiedError,
    ResolutionError,
    RuleError,
    RuleEvaluationError,
    RuleExecutionError,
    RuleKitError,
    TypeMismatchError,
    UnsupportedMultiReturnError,
)
from rulekit.core.log import get_logger, set_log_level

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "set_log_level",
    # Errors
    "RuleKitError",
    "FactError",
    "InvalidFactKindError",
    "FactNotFoundError",
    "FactRetractedError",
    "ResolutionError",
    "AttributeNotFoundError",
    "TypeMismatchError",
    "NoPathSpecifiedError",
    "ArgumentCountMismatchError",
    "ArgumentTypeMismatchError",
    "UnsupportedMultiReturnError",
    "RuleError",
    "RuleEvaluationError",
    "RuleExecutionError",
    "CycleExceededError",
]
