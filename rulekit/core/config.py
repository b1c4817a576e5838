"""Engine configuration loaded from the environment."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment (``RULEKIT_*``)."""

    # Execution
    max_cycle: int = Field(5000, ge=1)
    return_err_on_failed_rule_evaluation: bool = False
    raise_on_cycle_exceeded: bool = True

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "RULEKIT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
