"""
Forward-chaining execution of a knowledge base against a data context.

Every cycle re-evaluates all rule conditions against the current facts, fires
the matching rules by descending salience (registration order breaks ties),
and stops when:
- an action called ``ctx.complete()`` (halted)
- no rule matched and no field was written (converged)
- the cycle budget ran out (cycle exceeded)
"""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, Field

from rulekit.core.config import Settings, get_settings
from rulekit.core.errors import (
    CycleExceededError,
    FactRetractedError,
    RuleEvaluationError,
    RuleExecutionError,
)
from rulekit.core.log import get_logger, set_log_level
from rulekit.facts.context import DataContext
from rulekit.rules.schemas import KnowledgeBase, Rule
from rulekit.runtime.trace import ExecutionStatus, ExecutionTrace

logger = get_logger(__name__)


class EngineListener(Protocol):
    """Callbacks notified while the engine runs."""

    def begin_cycle(self, cycle: int) -> None:
        ...

    def evaluate_rule(self, cycle: int, rule: Rule, matched: bool) -> None:
        ...

    def execute_rule(self, cycle: int, rule: Rule) -> None:
        ...


class ExecutionResult(BaseModel):
    """Outcome of running a knowledge base to a stop."""

    knowledge_base: str
    """Name of the executed knowledge base."""

    version: str
    """Version of the executed knowledge base."""

    status: ExecutionStatus
    """Why execution stopped."""

    cycles: int = 0
    """Number of cycles run."""

    fired: list[str] = Field(default_factory=list)
    """Names of fired rules, in firing order across all cycles."""

    trace: ExecutionTrace | None = None
    """Detailed execution trace (optional)."""


class RuleEngine:
    """Runs knowledge bases against data contexts until a stopping condition.

    Failure policy:
    - a condition raising ``FactRetractedError`` simply does not match
    - any other condition failure is logged and the rule does not match, unless
      ``return_err_on_failed_rule_evaluation`` is set, which aborts the run
    - an action failure aborts the rule and the whole run
    """

    def __init__(
        self,
        max_cycle: int | None = None,
        settings: Settings | None = None,
        listeners: list[EngineListener] | None = None,
    ):
        """Initialize the engine.

        Args:
            max_cycle: Cycle budget per execution (defaults to settings)
            settings: Engine settings (uses global if not provided)
            listeners: Callbacks notified during execution
        """
        self._settings = settings or get_settings()
        self.max_cycle = max_cycle if max_cycle is not None else self._settings.max_cycle
        self.listeners: list[EngineListener] = list(listeners or [])
        set_log_level(self._settings.log_level)

    def execute(
        self,
        ctx: DataContext,
        kb: KnowledgeBase,
        max_cycle: int | None = None,
        include_trace: bool = True,
    ) -> ExecutionResult:
        """Run ``kb`` against ``ctx`` until it converges, halts or runs out of cycles.

        Args:
            ctx: Data context holding the facts
            kb: Knowledge base to execute
            max_cycle: Cycle budget overriding the engine's
            include_trace: Whether to record an execution trace

        Returns:
            ExecutionResult with the stop status

        Raises:
            RuleEvaluationError: If a condition fails and the settings say to abort
            RuleExecutionError: If an action fails
            CycleExceededError: If the budget ran out and the settings say to raise
        """
        limit = max_cycle if max_cycle is not None else self.max_cycle
        if limit < 1:
            raise ValueError(f"max_cycle must be at least 1, got {limit}")

        trace = ExecutionTrace(knowledge_base=kb.name, version=kb.version) if include_trace else None
        fired: list[str] = []
        cycle = 0
        status: ExecutionStatus | None = ExecutionStatus.HALTED if ctx.is_complete() else None

        while status is None:
            cycle += 1
            for listener in self.listeners:
                listener.begin_cycle(cycle)
            if trace is not None:
                trace.begin_cycle(cycle)

            ctx.reset_variable_change_count()
            matched = self._select(ctx, kb, cycle, trace)
            logger.debug("cycle %d of %s: %d rule(s) matched", cycle, kb.name, len(matched))

            for rule in matched:
                self._fire(ctx, rule, cycle, trace)
                fired.append(rule.name)

            if trace is not None:
                trace.cycles[-1].mutations = ctx.variable_change_count

            if ctx.is_complete():
                status = ExecutionStatus.HALTED
            elif not matched and not ctx.has_variable_change():
                status = ExecutionStatus.CONVERGED
            elif cycle >= limit:
                status = ExecutionStatus.CYCLE_EXCEEDED

        if trace is not None:
            trace.complete(status)

        result = ExecutionResult(
            knowledge_base=kb.name,
            version=kb.version,
            status=status,
            cycles=cycle,
            fired=fired,
            trace=trace,
        )

        if status is ExecutionStatus.CYCLE_EXCEEDED:
            if self._settings.raise_on_cycle_exceeded:
                raise CycleExceededError(result)
            logger.warning("%s stopped after reaching max cycle %d", kb.name, limit)
        else:
            logger.debug("%s %s after %d cycle(s)", kb.name, status.value, cycle)

        return result

    def fetch_matching_rules(self, ctx: DataContext, kb: KnowledgeBase) -> list[Rule]:
        """Evaluate every rule once and return the matches in firing order, without firing."""
        return self._select(ctx, kb, cycle=0, trace=None)

    def _select(
        self,
        ctx: DataContext,
        kb: KnowledgeBase,
        cycle: int,
        trace: ExecutionTrace | None,
    ) -> list[Rule]:
        """Evaluate non-retracted rules and order the matches by salience."""
        candidates: list[Rule] = []

        for rule in kb.rules:
            if ctx.is_retracted(rule.name):
                continue

            error: str | None = None
            try:
                matched = rule.evaluate(ctx)
            except FactRetractedError as err:
                logger.debug("rule %s skipped: %s", rule.name, err)
                matched = False
            except Exception as err:
                logger.error("Failed testing condition for rule %s: %s", rule.name, err)
                if self._settings.return_err_on_failed_rule_evaluation:
                    if isinstance(err, RuleEvaluationError):
                        raise
                    raise RuleEvaluationError(
                        rule.name, f"error while evaluating rule {rule.name}. got {err}"
                    ) from err
                matched = False
                error = str(err)

            if trace is not None:
                trace.add_step(
                    rule.name,
                    "evaluate",
                    salience=rule.salience,
                    result=None if error else matched,
                    error=error,
                )
            for listener in self.listeners:
                listener.evaluate_rule(cycle, rule, matched)
            if matched:
                candidates.append(rule)

        # sorted() is stable: equal salience keeps registration order
        return sorted(candidates, key=lambda r: -r.salience)

    def _fire(
        self,
        ctx: DataContext,
        rule: Rule,
        cycle: int,
        trace: ExecutionTrace | None,
    ) -> None:
        """Run a rule's actions, wrapping any failure in RuleExecutionError."""
        for listener in self.listeners:
            listener.execute_rule(cycle, rule)
        try:
            rule.execute(ctx)
        except Exception as err:
            if trace is not None:
                trace.add_step(rule.name, "execute", salience=rule.salience, error=str(err))
            raise RuleExecutionError(
                rule.name, f"error while executing rule {rule.name}. got {err}"
            ) from err
        if trace is not None:
            trace.add_step(rule.name, "execute", salience=rule.salience)


def execute(
    ctx: DataContext,
    kb: KnowledgeBase,
    max_cycle: int | None = None,
    include_trace: bool = True,
) -> ExecutionResult:
    """Convenience function to run a knowledge base with a default engine.

    Args:
        ctx: Data context holding the facts
        kb: Knowledge base to execute
        max_cycle: Cycle budget (defaults to settings)
        include_trace: Whether to record an execution trace

    Returns:
        ExecutionResult
    """
    return RuleEngine(max_cycle=max_cycle).execute(ctx, kb, include_trace=include_trace)
