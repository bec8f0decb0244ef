from .dcf import annualize_from_monthly, irr, monthly_rate_from_annual, npv
from .engine import DealEvaluation, evaluate
from .params import EXAMPLE_SCENARIO, DealParameters, example_parameters
from .reporting import AnnualRow, DealSummary
from .schedule import PeriodRow

__all__ = [
    "AnnualRow",
    "DealEvaluation",
    "DealParameters",
    "DealSummary",
    "EXAMPLE_SCENARIO",
    "PeriodRow",
    "annualize_from_monthly",
    "evaluate",
    "example_parameters",
    "irr",
    "monthly_rate_from_annual",
    "npv",
]
