"""
Monthly accrual P&L and cash-flow schedule.

Period 0 is the deal inception: a pure cash event carrying the CAPEX outflow and the
upfront payment inflow, with no accrual revenue or COGS. Periods 1..term are the
operating months.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .cash_model import CashModel, build_cash_model
from .params import DealParameters


@dataclass(frozen=True)
class PeriodRow:
    period: int
    recurring_revenue: float
    deferred_revenue: float
    revenue: float
    cogs_recurring: float
    amort_primary: float
    amort_secondary: float
    amort_installation: float
    amortization: float
    total_cogs: float
    gross_margin: float
    gross_margin_pct: float
    operating_profit: float
    depreciation_addback: float
    deferred_revenue_release: float
    capex_cash: float
    upfront_cash: float
    fcf: float
    cum_fcf: float

    @property
    def is_inception(self) -> bool:
        return self.period == 0


def margin_pct(margin, revenue):
    return margin / revenue if revenue > 0 else 0.0


def _period_row(model: CashModel, period: int, prev_cum: float) -> PeriodRow:
    operating = period >= 1

    recurring_revenue = model.recurring_revenue if operating else 0.0
    deferred_revenue = model.deferred_revenue(period)
    revenue = recurring_revenue + deferred_revenue

    cogs_recurring = model.recurring_cost if operating else 0.0
    amort_p, amort_s, amort_i = model.amortization(period)
    amortization = amort_p + amort_s + amort_i
    total_cogs = cogs_recurring + amortization

    gross_margin = revenue - total_cogs
    operating_profit = gross_margin  # no OpEx layer beyond COGS

    capex_cash = 0.0 if operating else -model.capex_total
    upfront_cash = 0.0 if operating else model.upfront_cash

    # Deferred upfront revenue was already collected at inception
    fcf = operating_profit + amortization - deferred_revenue + capex_cash + upfront_cash

    return PeriodRow(
        period=period,
        recurring_revenue=recurring_revenue,
        deferred_revenue=deferred_revenue,
        revenue=revenue,
        cogs_recurring=cogs_recurring,
        amort_primary=amort_p,
        amort_secondary=amort_s,
        amort_installation=amort_i,
        amortization=amortization,
        total_cogs=total_cogs,
        gross_margin=gross_margin,
        gross_margin_pct=margin_pct(gross_margin, revenue),
        operating_profit=operating_profit,
        depreciation_addback=amortization,
        deferred_revenue_release=deferred_revenue,
        capex_cash=capex_cash,
        upfront_cash=upfront_cash,
        fcf=fcf,
        cum_fcf=prev_cum + fcf,
    )


def build_schedule(params: DealParameters, model: Optional[CashModel] = None) -> Tuple[PeriodRow, ...]:
    """Rows for periods 0..term, in order, with running cumulative FCF."""
    if model is None:
        model = build_cash_model(params)
    rows: List[PeriodRow] = []
    cum_fcf = 0.0
    for period in range(0, params.term_months + 1):
        row = _period_row(model, period, cum_fcf)
        cum_fcf = row.cum_fcf
        rows.append(row)
    return tuple(rows)


def cash_flows(rows):
    """FCF vector with index 0 = inception, as used for NPV/IRR."""
    return [r.fcf for r in rows]


def operating_rows(rows):
    return [r for r in rows if not r.is_inception]
