"""
Feature modules live under this package.

Each module owns its models, validation, service functions and routes, and reuses
the platform primitives (config, DB engine/session scope, error types).
"""
