"""Pytest fixtures for test suite."""

import pytest

from fact_models import Address, Audit, Counter, User
from rulekit.core.config import Settings
from rulekit.facts import DataContext, new_data_context
from rulekit.runtime import RuleEngine


# =============================================================================
# Facts
# =============================================================================


@pytest.fixture
def user() -> User:
    """User fact living in London."""
    return User(name="Watson", age=30, address=Address(city="London"))


@pytest.fixture
def counter() -> Counter:
    """Counter fact without type annotations."""
    return Counter()


@pytest.fixture
def audit() -> Audit:
    """Audit fact recording action order."""
    return Audit()


@pytest.fixture
def ctx(user: User, audit: Audit) -> DataContext:
    """Data context with the User and Audit facts."""
    context = new_data_context()
    context.add("User", user)
    context.add("Audit", audit)
    return context


# =============================================================================
# Engine
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the environment."""
    return Settings(
        max_cycle=100,
        return_err_on_failed_rule_evaluation=False,
        raise_on_cycle_exceeded=True,
        log_level="DEBUG",
    )


@pytest.fixture
def engine(settings: Settings) -> RuleEngine:
    """Engine using the test settings."""
    return RuleEngine(settings=settings)
