"""
Execution tracing for rule engine runs.

Records, cycle by cycle, which rules were evaluated, which matched and which
fired, enabling:
- Debugging of rule sets that never converge
- Explanation of why a fact ended up with a given value
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class ExecutionStatus(str, Enum):
    """How an execution ended."""

    CONVERGED = "converged"
    HALTED = "halted"
    CYCLE_EXCEEDED = "cycle_exceeded"


class TraceStep(BaseModel):
    """A single rule evaluation or firing within a cycle."""

    rule_name: str
    """The rule this step is about."""

    salience: int = 0
    """Salience of the rule."""

    phase: Literal["evaluate", "execute"]
    """Whether the condition was evaluated or the actions were fired."""

    result: bool | None = None
    """Condition result for 'evaluate' steps (None if the condition failed)."""

    error: str | None = None
    """Error message if the step failed."""


class CycleTrace(BaseModel):
    """All steps taken in one evaluate-then-fire cycle."""

    cycle: int
    """1-based cycle number."""

    steps: list[TraceStep] = Field(default_factory=list)
    """Steps in the order they happened."""

    mutations: int = 0
    """Successful field writes made during the cycle."""

    @property
    def matched(self) -> list[str]:
        """Rules whose condition held in this cycle."""
        return [s.rule_name for s in self.steps if s.phase == "evaluate" and s.result]

    @property
    def fired(self) -> list[str]:
        """Rules fired in this cycle, in firing order."""
        return [s.rule_name for s in self.steps if s.phase == "execute"]


class ExecutionTrace(BaseModel):
    """Complete trace of one engine execution."""

    knowledge_base: str
    """Name of the knowledge base that was executed."""

    version: str
    """Version of the knowledge base."""

    started_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    """ISO timestamp of when execution started."""

    completed_at: str | None = None
    """ISO timestamp of when execution stopped."""

    status: ExecutionStatus | None = None
    """How the execution ended (None while running or after an error)."""

    cycles: list[CycleTrace] = Field(default_factory=list)
    """Per-cycle traces."""

    def begin_cycle(self, cycle: int) -> CycleTrace:
        """Start recording a new cycle.

        Returns:
            The created CycleTrace
        """
        trace = CycleTrace(cycle=cycle)
        self.cycles.append(trace)
        return trace

    def add_step(
        self,
        rule_name: str,
        phase: Literal["evaluate", "execute"],
        salience: int = 0,
        result: bool | None = None,
        error: str | None = None,
    ) -> TraceStep:
        """Add a step to the current cycle.

        Returns:
            The created TraceStep
        """
        if not self.cycles:
            self.begin_cycle(1)
        step = TraceStep(
            rule_name=rule_name,
            salience=salience,
            phase=phase,
            result=result,
            error=error,
        )
        self.cycles[-1].steps.append(step)
        return step

    def complete(self, status: ExecutionStatus | None = None) -> None:
        """Mark the trace as complete.

        Args:
            status: How the execution ended
        """
        self.status = status
        self.completed_at = datetime.now(timezone.utc).isoformat()

    def to_flat_trace(self) -> list[dict[str, Any]]:
        """Flatten all cycles into one list of step dictionaries."""
        flat = []
        for cycle in self.cycles:
            for step in cycle.steps:
                flat.append({
                    "cycle": cycle.cycle,
                    "rule_name": step.rule_name,
                    "salience": step.salience,
                    "phase": step.phase,
                    "result": step.result,
                    "error": step.error,
                })
        return flat
