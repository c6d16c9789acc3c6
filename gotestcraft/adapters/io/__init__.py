"""Filesystem and console adapters."""
