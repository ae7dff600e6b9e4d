"""Exception taxonomy for the loontijdvak and forfait engines."""

from __future__ import annotations

from typing import Any


class LoontijdvakError(Exception):
    """Base class for all engine errors."""


class ValidationError(LoontijdvakError):
    """Raised for malformed or logically inconsistent input.

    Always surfaced to the caller; aborts the operation that raised it.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidPeriodTypeError(ValidationError):
    """Raised when a wage period type is not one of the known variants."""

    def __init__(self, period_type: Any):
        self.period_type = period_type
        super().__init__(
            f"Invalid loontijdvak type '{period_type}': "
            "must be one of daily, weekly, monthly, yearly",
            {"period_type": str(period_type)},
        )


class MissingMappedValuesError(ValidationError):
    """Raised when required forfait target fields are absent after mapping."""

    def __init__(self, missing_fields: list[str]):
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Required forfait values missing: {', '.join(self.missing_fields)}",
            {"missing_fields": self.missing_fields},
        )


class NotFoundError(LoontijdvakError):
    """Raised when a referenced component, rule or assignment is absent."""

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} '{key}' not found")
