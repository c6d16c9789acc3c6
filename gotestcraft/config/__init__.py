"""Configuration management for gotestcraft."""

from .loader import ConfigLoader, ConfigurationError
from .models import GoTestCraftConfig

__all__ = [
    "GoTestCraftConfig",
    "ConfigLoader",
    "ConfigurationError",
]
