"""Application layer: use cases and the services they orchestrate."""
