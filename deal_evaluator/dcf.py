"""
Discounting helpers: NPV at a periodic rate and a bounded IRR solver.

The IRR search is a bisection over monthly rates in [IRR_LOW, IRR_HIGH]. Early CAPEX against
small monthly inflows can put the root far from zero, hence the wide bracket. When the
bracket shows no sign change (or NPV is not finite at an end), a coarse scan takes over:
a sign change between two scan points is bisected, otherwise the scan rate with the
smallest |NPV| is returned and flagged as not converged.

Known limitation: with several sign changes in the cash flows there may be several roots;
the first one the bisection lands on is returned.
"""
import logging
from typing import NamedTuple, Optional, Sequence

import numpy as np
import numpy_financial as npf

logger = logging.getLogger(__name__)

IRR_LOW = -0.9999
IRR_HIGH = 10.0
IRR_MAX_ITER = 200
IRR_EPS = 1e-8

SCAN_LOW = -0.9
SCAN_HIGH = 1.0
SCAN_STEP = 0.01


class IrrResult(NamedTuple):
    monthly: Optional[float]
    converged: bool

    @property
    def annual(self) -> Optional[float]:
        return annualize_from_monthly(self.monthly)


# -------------------------
# Financial helpers
# -------------------------
def monthly_rate_from_annual(annual_rate):
    if annual_rate <= -1.0:
        return float("nan")
    return (1.0 + annual_rate) ** (1.0 / 12.0) - 1.0


def annualize_from_monthly(r):
    return (1 + r) ** 12 - 1 if r is not None and not np.isnan(r) else None


def npv(rate, cashflows: Sequence[float]) -> float:
    """Sum of cashflows[t] / (1 + rate)^t; NaN when the sum is not finite."""
    if len(cashflows) == 0:
        return 0.0
    with np.errstate(all="ignore"):
        value = float(npf.npv(rate, np.asarray(cashflows, dtype=float)))
    return value if np.isfinite(value) else float("nan")


# -------------------------
# IRR search
# -------------------------
def _bisect(cf, low, high, f_low):
    mid = low
    for _ in range(IRR_MAX_ITER):
        mid = (low + high) / 2.0
        f_mid = npv(mid, cf)
        if not np.isfinite(f_mid):
            return None
        if abs(f_mid) < IRR_EPS:
            return mid
        if np.sign(f_low) * np.sign(f_mid) <= 0:
            high = mid
        else:
            low, f_low = mid, f_mid
    return mid


def _scan(cf):
    rates = np.arange(SCAN_LOW, SCAN_HIGH + SCAN_STEP / 2, SCAN_STEP)
    values = np.array([npv(r, cf) for r in rates])
    finite = np.isfinite(values)
    if not finite.any():
        return IrrResult(None, False)

    # Adjacent finite points with a sign change bracket a real root
    for i in range(len(rates) - 1):
        if finite[i] and finite[i + 1] and np.sign(values[i]) * np.sign(values[i + 1]) <= 0:
            if values[i] == 0:
                return IrrResult(float(rates[i]), True)
            root = _bisect(cf, float(rates[i]), float(rates[i + 1]), float(values[i]))
            if root is not None:
                return IrrResult(root, True)

    best = int(np.nanargmin(np.where(finite, np.abs(values), np.nan)))
    return IrrResult(float(rates[best]), False)


def irr(cashflows: Sequence[float]) -> IrrResult:
    """Monthly IRR of a cash-flow vector (index 0 = inception). Always terminates."""
    cf = np.asarray(cashflows, dtype=float)
    if cf.size == 0 or not np.any(cf != 0):
        return IrrResult(None, False)

    f_low, f_high = npv(IRR_LOW, cf), npv(IRR_HIGH, cf)
    if np.isfinite(f_low) and np.isfinite(f_high):
        if f_low == 0:
            return IrrResult(IRR_LOW, True)
        if f_high == 0:
            return IrrResult(IRR_HIGH, True)
        if np.sign(f_low) != np.sign(f_high):
            root = _bisect(cf, IRR_LOW, IRR_HIGH, f_low)
            if root is not None:
                return IrrResult(root, True)

    result = _scan(cf)
    if result.monthly is None:
        logger.warning("IRR unavailable: NPV is not finite anywhere on the scan range")
    elif not result.converged:
        logger.warning("IRR did not converge; using scan rate %.4f with the smallest |NPV|", result.monthly)
    return result
