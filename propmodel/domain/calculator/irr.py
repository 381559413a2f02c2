"""Internal rate of return solver.

Bisection over a bounded rate range. The bounds, iteration cap and tolerance
come from ``EngineSettings`` so a reported IRR is reproducible.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy_financial as npf

from propmodel.core.logging import get_logger
from propmodel.core.settings import EngineSettings, get_settings

log = get_logger(__name__)

# Number of grid points used to look for a sign change when the NPV has the
# same sign at both bounds.
BRACKET_SCAN_POINTS = 200


def npv(rate: float, cashflows: Sequence[float]) -> float:
    """Net present value with the first flow at t=0."""
    return float(npf.npv(rate, cashflows))


def _find_bracket(
    values: np.ndarray, lower: float, upper: float
) -> tuple[float, float] | None:
    grid = np.linspace(lower, upper, BRACKET_SCAN_POINTS + 1)
    npvs = [npv(r, values) for r in grid]
    for i in range(len(grid) - 1):
        if npvs[i] == 0.0:
            return grid[i], grid[i]
        if npvs[i] * npvs[i + 1] < 0:
            return grid[i], grid[i + 1]
    if npvs[-1] == 0.0:
        return grid[-1], grid[-1]
    return None


def solve_irr(
    cashflows: Sequence[float],
    settings: EngineSettings | None = None,
) -> float:
    """Find the rate r such that sum(CF_t / (1+r)^t) = 0.

    Args:
        cashflows: Ordered flows, t=0 first (normally a negative outlay)
        settings: Solver bounds and tolerances (defaults to global settings)

    Returns:
        IRR as a fraction (0.08 for 8%). 0.0 when the series has no sign
        change or no root exists inside the bounded range.
    """
    settings = settings or get_settings()
    values = np.asarray(cashflows, dtype=float)

    if values.size < 2 or not np.all(np.isfinite(values)):
        return 0.0
    if not (values < 0).any() or not (values > 0).any():
        log.debug("irr_no_sign_change", n_flows=int(values.size))
        return 0.0

    lower, upper = settings.irr_lower_bound, settings.irr_upper_bound
    tolerance = settings.irr_tolerance * max(1.0, float(np.abs(values).sum()))

    f_lower = npv(lower, values)
    f_upper = npv(upper, values)
    if f_lower * f_upper > 0:
        bracket = _find_bracket(values, lower, upper)
        if bracket is None:
            log.debug("irr_no_root", lower=lower, upper=upper)
            return 0.0
        lower, upper = bracket
        if lower == upper:
            return float(lower)
        f_lower = npv(lower, values)

    mid = (lower + upper) / 2.0
    for _ in range(settings.irr_max_iterations):
        mid = (lower + upper) / 2.0
        f_mid = npv(mid, values)
        if abs(f_mid) <= tolerance:
            break
        if f_lower * f_mid < 0:
            upper = mid
        else:
            lower, f_lower = mid, f_mid

    return float(mid)
