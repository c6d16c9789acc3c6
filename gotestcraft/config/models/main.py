"""Main gotestcraft configuration model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .generation import GenerationConfig, ImportsConfig
from .ui import LoggingConfig


class GoTestCraftConfig(BaseModel):
    """Main configuration model for gotestcraft."""

    # Scaffold generation behavior
    generation: GenerationConfig = Field(
        default_factory=GenerationConfig,
        description="Scaffold generation behavior configuration",
    )

    # Import merging
    imports: ImportsConfig = Field(
        default_factory=ImportsConfig,
        description="Import merging configuration",
    )

    # Logging configuration
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging behavior configuration",
    )

    def get_nested_value(self, key: str, default=None):
        """Get configuration value using dot notation (e.g., 'generation.indent')."""
        keys = key.split(".")
        value = self.model_dump()

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def update_from_dict(self, updates: dict[str, Any]) -> "GoTestCraftConfig":
        """Update configuration with values from a dictionary."""
        current_dict = self.model_dump()
        updated_dict = _deep_merge(current_dict, updates)
        return GoTestCraftConfig(**updated_dict)

    model_config = ConfigDict(validate_assignment=True, extra="forbid")


def _deep_merge(base: dict, updates: dict) -> dict:
    """Deeply merge updates into base dictionary."""
    result = base.copy()

    for key, value in updates.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
