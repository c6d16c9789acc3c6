"""Adapters implementing the gotestcraft ports."""
