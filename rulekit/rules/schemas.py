"""Rule and knowledge base models consumed by the engine."""

from __future__ import annotations

from typing import Callable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rulekit.core.errors import RuleEvaluationError
from rulekit.facts.context import DataContext

Condition = Callable[[DataContext], bool]
Action = Callable[[DataContext], None]


# =============================================================================
# Rule
# =============================================================================


class Rule(BaseModel):
    """A compiled rule: a condition over the data context and the actions to fire."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Rule name, unique in its knowledge base")
    description: str | None = Field(None, description="Human-readable description")
    salience: int = Field(0, description="Priority, higher fires first")
    when: Condition = Field(..., description="Condition evaluated every cycle")
    then: tuple[Action, ...] = Field(default_factory=tuple, description="Actions fired in order")

    def evaluate(self, ctx: DataContext) -> bool:
        """Evaluate the condition against ``ctx``.

        Raises:
            RuleEvaluationError: If the condition does not return a bool
        """
        result = self.when(ctx)
        if not isinstance(result, bool):
            raise RuleEvaluationError(
                self.name,
                f"condition of rule {self.name} returned {type(result).__name__}, expected bool",
            )
        return result

    def execute(self, ctx: DataContext) -> None:
        """Run every action in order; the first failure propagates."""
        for action in self.then:
            action(ctx)


# =============================================================================
# Knowledge Base
# =============================================================================


class KnowledgeBase(BaseModel):
    """Ordered, read-only set of rules for one ruleset version."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Ruleset name")
    version: str = Field("0.0.1", description="Ruleset version")
    rules: tuple[Rule, ...] = Field(default_factory=tuple, description="Rules in registration order")

    @model_validator(mode="after")
    def check_unique_names(self) -> KnowledgeBase:
        seen: set[str] = set()
        for rule in self.rules:
            if rule.name in seen:
                raise ValueError(f"duplicate rule name: {rule.name}")
            seen.add(rule.name)
        return self

    def get_rule(self, name: str) -> Rule | None:
        """Get a rule by name."""
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None

    def with_rule(self, rule: Rule) -> KnowledgeBase:
        """Return a new knowledge base with ``rule`` appended."""
        return KnowledgeBase(name=self.name, version=self.version, rules=(*self.rules, rule))
