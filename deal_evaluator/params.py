"""
Deal parameters: the one validated input record of the evaluator.

Every numeric field is cleaned once, here. Non-finite values become 0, the term is
kept between one month and MAX_TERM_MONTHS, a discount rate at or below -100% falls
back to the default, unit counts and deferral shares are clamped to their
ranges. Anything that is not a number at all is left for pydantic to reject.
"""
import logging
import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

MONEY_FIELDS = (
    "monthly_revenue_per_unit",
    "upfront_payment_per_unit",
    "upfront_payment_total",
    "primary_hw_capex_per_unit",
    "secondary_hw_capex_per_unit",
    "installation_capex_per_unit",
    "connectivity_cost_per_unit",
    "third_party_cost_per_unit",
    "license_cost_per_unit",
    "labor_cost_per_unit",
    "warranty_cost_per_unit",
)

AMORT_FIELDS = (
    "primary_hw_amort_months",
    "secondary_hw_amort_months",
    "installation_amort_months",
)

MAX_TERM_MONTHS = 1200
DEFAULT_DISCOUNT_RATE = 0.10


def clean_float(value, field="value"):
    """Replace non-finite float values with 0.0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    if not math.isfinite(number):
        logger.warning("Non-finite %s=%r replaced with 0", field, value)
        return 0.0
    return number


def _whole_months(value, field):
    number = clean_float(value, field)
    if not isinstance(number, float):
        return number
    return int(math.floor(number))


class DealParameters(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    term_months: int = 36
    units: float = 0.0

    monthly_revenue_per_unit: float = 0.0
    upfront_payment_per_unit: float = 0.0
    upfront_payment_total: float = 0.0

    # CAPEX per unit, all paid in cash at inception
    primary_hw_capex_per_unit: float = 0.0
    secondary_hw_capex_per_unit: float = 0.0
    installation_capex_per_unit: float = 0.0

    primary_hw_amort_months: int = 24
    secondary_hw_amort_months: int = 24
    installation_amort_months: int = 24

    # Recurring cash COGS per unit per month
    connectivity_cost_per_unit: float = 0.0
    third_party_cost_per_unit: float = 0.0
    license_cost_per_unit: float = 0.0
    labor_cost_per_unit: float = 0.0
    warranty_cost_per_unit: float = 0.0

    discount_rate_annual: float = DEFAULT_DISCOUNT_RATE

    upfront_deferred_share: float = 0.0
    upfront_deferral_months: Optional[int] = None

    @field_validator(*MONEY_FIELDS, mode="before")
    @classmethod
    def _finite_or_zero(cls, v, info):
        return clean_float(v, info.field_name)

    @field_validator("term_months", mode="before")
    @classmethod
    def _term_range(cls, v):
        months = _whole_months(v, "term_months")
        if isinstance(months, int) and months < 1:
            logger.warning("term_months=%r clamped to 1", v)
            return 1
        if isinstance(months, int) and months > MAX_TERM_MONTHS:
            logger.warning("term_months=%r clamped to %d", v, MAX_TERM_MONTHS)
            return MAX_TERM_MONTHS
        return months

    @field_validator("discount_rate_annual", mode="before")
    @classmethod
    def _discount_rate(cls, v):
        rate = clean_float(v, "discount_rate_annual")
        # Rates at or below -100% have no monthly equivalent
        if isinstance(rate, float) and rate <= -1.0:
            logger.warning("discount_rate_annual=%r replaced with %.2f", v, DEFAULT_DISCOUNT_RATE)
            return DEFAULT_DISCOUNT_RATE
        return rate

    @field_validator("units", mode="before")
    @classmethod
    def _non_negative_units(cls, v):
        units = clean_float(v, "units")
        if isinstance(units, float) and units < 0:
            logger.warning("units=%r clamped to 0", v)
            return 0.0
        return units

    @field_validator(*AMORT_FIELDS, mode="before")
    @classmethod
    def _amort_months(cls, v, info):
        # Non-positive terms are kept: the bucket is then never amortized.
        return _whole_months(v, info.field_name)

    @field_validator("upfront_deferred_share", mode="before")
    @classmethod
    def _share(cls, v):
        share = clean_float(v, "upfront_deferred_share")
        if not isinstance(share, float):
            return share
        if share < 0.0 or share > 1.0:
            logger.warning("upfront_deferred_share=%r clamped to [0, 1]", v)
        return min(max(share, 0.0), 1.0)

    @field_validator("upfront_deferral_months", mode="before")
    @classmethod
    def _deferral_months(cls, v):
        if v is None:
            return None
        return _whole_months(v, "upfront_deferral_months")

    @property
    def capex_per_unit(self) -> float:
        return self.primary_hw_capex_per_unit + self.secondary_hw_capex_per_unit + self.installation_capex_per_unit

    @property
    def recurring_cost_per_unit(self) -> float:
        return (
            self.connectivity_cost_per_unit
            + self.third_party_cost_per_unit
            + self.license_cost_per_unit
            + self.labor_cost_per_unit
            + self.warranty_cost_per_unit
        )


# Defaults of the interactive deal evaluator
EXAMPLE_SCENARIO = {
    "term_months": 36,
    "units": 5_000,
    "monthly_revenue_per_unit": 2.5,
    "upfront_payment_total": 250_000,
    "primary_hw_capex_per_unit": 12,
    "secondary_hw_capex_per_unit": 18,
    "installation_capex_per_unit": 10,
    "primary_hw_amort_months": 24,
    "secondary_hw_amort_months": 24,
    "installation_amort_months": 24,
    "connectivity_cost_per_unit": 0.35,
    "third_party_cost_per_unit": 0.20,
    "license_cost_per_unit": 0.25,
    "labor_cost_per_unit": 0.15,
    "warranty_cost_per_unit": 0.05,
    "discount_rate_annual": 0.10,
    "upfront_deferred_share": 1.0,
}


def example_parameters() -> DealParameters:
    return DealParameters(**EXAMPLE_SCENARIO)
