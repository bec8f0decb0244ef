"""
Deal evaluation entry point.

evaluate() is a pure function: it validates the parameters once, then builds the cash
model, the monthly schedule, the annual roll-up and the KPIs from scratch on every call.
"""
import logging
from typing import Mapping, NamedTuple, Tuple, Union

import pandas as pd

from .cash_model import build_cash_model
from .export import annual_frame, schedule_frame
from .params import DealParameters
from .reporting import AnnualRow, DealSummary, build_annual_rows, summarize
from .schedule import PeriodRow, build_schedule, cash_flows

logger = logging.getLogger(__name__)


class DealEvaluation(NamedTuple):
    schedule: Tuple[PeriodRow, ...]
    annual: Tuple[AnnualRow, ...]
    summary: DealSummary

    def cash_flows(self):
        return cash_flows(self.schedule)

    def schedule_frame(self) -> pd.DataFrame:
        return schedule_frame(self.schedule)

    def annual_frame(self) -> pd.DataFrame:
        return annual_frame(self.annual)


def evaluate(params: Union[DealParameters, Mapping]) -> DealEvaluation:
    if not isinstance(params, DealParameters):
        params = DealParameters.model_validate(params)

    model = build_cash_model(params)
    schedule = build_schedule(params, model)
    annual = build_annual_rows(schedule)
    summary = summarize(schedule, params.discount_rate_annual)

    logger.debug(
        "Evaluated %d-month deal for %s units: npv=%.2f irr=%s payback=%s",
        params.term_months, params.units, summary.npv, summary.irr, summary.payback_month,
    )
    return DealEvaluation(schedule, annual, summary)
