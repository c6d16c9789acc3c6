"""Domain models for gotestcraft."""
