"""Wage period, prorating and payroll run calculators."""

from loontijdvak.calculators.engine import PayrollRunCalculator, PayrollRunRequest
from loontijdvak.calculators.forfait_calculator import ForfaitAmountCalculator
from loontijdvak.calculators.line_builder import ComponentLineBuilder
from loontijdvak.calculators.loontijdvak import LoontijdvakEngine
from loontijdvak.calculators.period_table import DEFAULT_PERIOD_TABLE, PeriodTable
from loontijdvak.calculators.prorating import ProratingCalculator, ProratingConfig

__all__ = [
    "DEFAULT_PERIOD_TABLE",
    "ComponentLineBuilder",
    "ForfaitAmountCalculator",
    "LoontijdvakEngine",
    "PayrollRunCalculator",
    "PayrollRunRequest",
    "PeriodTable",
    "ProratingCalculator",
    "ProratingConfig",
]
