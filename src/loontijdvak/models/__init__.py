"""ORM models."""

from loontijdvak.models.assignment import EmployeeComponentAssignment
from loontijdvak.models.base import Base, TimestampMixin
from loontijdvak.models.component import WageComponent

__all__ = [
    "Base",
    "TimestampMixin",
    "WageComponent",
    "EmployeeComponentAssignment",
]
