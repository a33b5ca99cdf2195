"""Error taxonomy for the enumeration engine."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Fatal misconfiguration; aborts the whole enumeration.

    Raised for zero-width choices, empty catalogs, and operand types that
    have neither an existing value nor a way to synthesize one.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        type_name: str | None = None,
    ):
        self.operation = operation
        self.type_name = type_name
        details = []
        if operation:
            details.append(f"operation={operation}")
        if type_name:
            details.append(f"type={type_name}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class CatalogLoadError(ConfigurationError):
    """A catalog file could not be parsed or validated."""
