"""Configuration models for gotestcraft, organized by concern."""

from .generation import GenerationConfig, ImportsConfig
from .main import GoTestCraftConfig
from .ui import LoggingConfig

__all__ = [
    "GoTestCraftConfig",
    "GenerationConfig",
    "ImportsConfig",
    "LoggingConfig",
]
