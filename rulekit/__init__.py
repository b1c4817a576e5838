"""
rulekit - forward-chaining rule engine runtime.

Holds caller-owned objects as named facts, lets rule conditions and actions
navigate them with dotted paths, and runs rule sets until they converge,
halt or exhaust their cycle budget.
"""

from rulekit.core.errors import CycleExceededError, RuleKitError
from rulekit.facts import DataContext, new_data_context
from rulekit.rules import KnowledgeBase, Rule
from rulekit.runtime import ExecutionResult, ExecutionStatus, RuleEngine, execute

__version__ = "0.1.0"

__all__ = [
    "DataContext",
    "new_data_context",
    "Rule",
    "KnowledgeBase",
    "RuleEngine",
    "ExecutionResult",
    "ExecutionStatus",
    "execute",
    "RuleKitError",
    "CycleExceededError",
]
