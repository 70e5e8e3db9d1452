"""Errors raised while configuring generated entities."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised when a generated type or module is configured inconsistently.

    Configuration errors are fatal: they are reported before any artifact
    is written and no partial output should be trusted.
    """


class UnknownOperationError(ConfigurationError):
    def __init__(self, operation: str, owner: str = ""):
        self.operation = operation
        self.owner = owner
        where = f" on {owner}" if owner else ""
        super().__init__(f"unknown operation '{operation}'{where}")
