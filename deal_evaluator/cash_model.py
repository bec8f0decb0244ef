"""Per-period constants derived from the static deal parameters."""
from dataclasses import dataclass
from typing import Tuple

from .params import DealParameters


@dataclass(frozen=True)
class CashModel:
    # Month 0 cash events
    capex_primary: float
    capex_secondary: float
    capex_installation: float
    upfront_cash: float

    # Monthly amortization (non-cash COGS) and the months it runs for
    amort_primary: float
    amort_secondary: float
    amort_installation: float
    amort_months_primary: int
    amort_months_secondary: int
    amort_months_installation: int

    recurring_revenue: float
    recurring_cost: float

    deferred_revenue_monthly: float
    deferral_months: int

    @property
    def capex_total(self) -> float:
        return self.capex_primary + self.capex_secondary + self.capex_installation

    @property
    def inception_cash(self) -> float:
        return self.upfront_cash - self.capex_total

    def amortization(self, period: int) -> Tuple[float, float, float]:
        """Amortization per bucket for an operating period (zero at inception and after each window)."""
        if period < 1:
            return 0.0, 0.0, 0.0
        return (
            self.amort_primary if period <= self.amort_months_primary else 0.0,
            self.amort_secondary if period <= self.amort_months_secondary else 0.0,
            self.amort_installation if period <= self.amort_months_installation else 0.0,
        )

    def deferred_revenue(self, period: int) -> float:
        if 1 <= period <= self.deferral_months:
            return self.deferred_revenue_monthly
        return 0.0


def monthly_amortization(capex, months):
    if months <= 0:
        return 0.0
    return capex / max(1, months)


def build_cash_model(params: DealParameters) -> CashModel:
    units = params.units

    capex_primary = units * params.primary_hw_capex_per_unit
    capex_secondary = units * params.secondary_hw_capex_per_unit
    capex_installation = units * params.installation_capex_per_unit

    upfront_cash = units * params.upfront_payment_per_unit
    if units > 0:
        upfront_cash += params.upfront_payment_total

    # Deferred share of the upfront payment, recognized evenly; window capped at the term
    deferral_source = params.upfront_deferral_months
    if deferral_source is None:
        deferral_source = params.secondary_hw_amort_months
    deferral_months = min(params.term_months, max(1, deferral_source))
    deferred_total = upfront_cash * params.upfront_deferred_share
    deferred_monthly = deferred_total / deferral_months if deferred_total else 0.0

    return CashModel(
        capex_primary=capex_primary,
        capex_secondary=capex_secondary,
        capex_installation=capex_installation,
        upfront_cash=upfront_cash,
        amort_primary=monthly_amortization(capex_primary, params.primary_hw_amort_months),
        amort_secondary=monthly_amortization(capex_secondary, params.secondary_hw_amort_months),
        amort_installation=monthly_amortization(capex_installation, params.installation_amort_months),
        amort_months_primary=params.primary_hw_amort_months,
        amort_months_secondary=params.secondary_hw_amort_months,
        amort_months_installation=params.installation_amort_months,
        recurring_revenue=units * params.monthly_revenue_per_unit,
        recurring_cost=units * params.recurring_cost_per_unit,
        deferred_revenue_monthly=deferred_monthly,
        deferral_months=deferral_months,
    )
