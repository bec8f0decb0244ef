"""Annual roll-up of the monthly schedule and the headline deal KPIs."""
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .dcf import irr, monthly_rate_from_annual, npv
from .schedule import PeriodRow, cash_flows, margin_pct, operating_rows

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class AnnualRow:
    year: int
    months: int
    revenue: float
    cogs_recurring: float
    amortization: float
    total_cogs: float
    gross_margin: float
    gross_margin_pct: float
    operating_profit: float
    fcf: float
    cum_revenue: float
    cum_fcf: float
    # Common-size ratios (fractions of revenue)
    cogs_pct_revenue: float
    operating_pct_revenue: float


@dataclass(frozen=True)
class DealSummary:
    npv: float
    irr: Optional[float]
    irr_monthly: Optional[float]
    irr_converged: bool
    payback_month: Optional[int]
    inception_cash: float
    cumulative_fcf: float
    blended_gross_margin_pct: float


def build_annual_rows(rows: Sequence[PeriodRow]) -> Tuple[AnnualRow, ...]:
    """
    Roll operating months into fiscal years of 12 (the last one may be shorter).
    Cumulative FCF starts from the inception cash event so the last year's figure
    matches the schedule's closing cumulative FCF.
    """
    months = operating_rows(rows)
    cum_rev = 0.0
    cum_fcf = sum(r.fcf for r in rows if r.is_inception)
    years = math.ceil(len(months) / MONTHS_PER_YEAR)

    annual: List[AnnualRow] = []
    for y in range(years):
        window = months[y * MONTHS_PER_YEAR:(y + 1) * MONTHS_PER_YEAR]
        revenue = sum(r.revenue for r in window)
        cogs_recurring = sum(r.cogs_recurring for r in window)
        amortization = sum(r.amortization for r in window)
        total_cogs = sum(r.total_cogs for r in window)
        gross_margin = revenue - total_cogs
        operating_profit = sum(r.operating_profit for r in window)
        fcf = sum(r.fcf for r in window)
        cum_rev += revenue
        cum_fcf += fcf
        annual.append(AnnualRow(
            year=y + 1,
            months=len(window),
            revenue=revenue,
            cogs_recurring=cogs_recurring,
            amortization=amortization,
            total_cogs=total_cogs,
            gross_margin=gross_margin,
            gross_margin_pct=margin_pct(gross_margin, revenue),
            operating_profit=operating_profit,
            fcf=fcf,
            cum_revenue=cum_rev,
            cum_fcf=cum_fcf,
            cogs_pct_revenue=total_cogs / revenue if revenue > 0 else 0.0,
            operating_pct_revenue=operating_profit / revenue if revenue > 0 else 0.0,
        ))
    return tuple(annual)


def payback_month(rows: Sequence[PeriodRow]) -> Optional[int]:
    """First period whose cumulative FCF is non-negative; None if the term never gets there."""
    for r in rows:
        if r.cum_fcf >= 0:
            return r.period
    return None


def blended_gross_margin(rows: Sequence[PeriodRow]) -> float:
    months = operating_rows(rows)
    revenue = sum(r.revenue for r in months)
    cogs = sum(r.total_cogs for r in months)
    return margin_pct(revenue - cogs, revenue)


def summarize(rows: Sequence[PeriodRow], discount_rate_annual: float) -> DealSummary:
    cf = cash_flows(rows)
    rate = irr(cf)
    return DealSummary(
        npv=npv(monthly_rate_from_annual(discount_rate_annual), cf),
        irr=rate.annual if rate.converged else None,
        irr_monthly=rate.monthly,
        irr_converged=rate.converged,
        payback_month=payback_month(rows),
        inception_cash=rows[0].fcf if rows else 0.0,
        cumulative_fcf=rows[-1].cum_fcf if rows else 0.0,
        blended_gross_margin_pct=blended_gross_margin(rows),
    )
