"""Command line interface for gotestcraft."""
