"""Loontijdvak (statutory wage period) and forfait engine."""

__version__ = "0.1.0"
