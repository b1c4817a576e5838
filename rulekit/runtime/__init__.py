"""
Runtime package.

Provides forward-chaining rule execution with:
- Full re-evaluation of every condition each cycle
- Salience ordering with registration-order tie-break
- Convergence, completion and cycle-budget stopping conditions
- Execution tracing for debugging
"""

from rulekit.runtime.engine import EngineListener, ExecutionResult, RuleEngine, execute
from rulekit.runtime.trace import CycleTrace, ExecutionStatus, ExecutionTrace, TraceStep

__all__ = [
    # Engine
    "RuleEngine",
    "EngineListener",
    "ExecutionResult",
    "execute",
    # Trace
    "ExecutionStatus",
    "ExecutionTrace",
    "CycleTrace",
    "TraceStep",
]
