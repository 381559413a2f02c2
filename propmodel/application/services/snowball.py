"""Debt-snowball payoff simulation.

Month-by-month simulation of several independent loans. Every active loan
receives its scheduled payment; the extra budget goes to one loan picked by
the strategy. When a loan is paid off its scheduled payment joins the extra
budget from the following month on.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import pandas as pd

from propmodel.core.exceptions import InvalidParameterError
from propmodel.core.logging import get_logger
from propmodel.core.settings import EngineSettings, get_settings
from propmodel.domain.models.snowball import (
    SnowballImpact,
    SnowballProperty,
    SnowballResult,
    SnowballStrategy,
    SnowballSummary,
)

log = get_logger(__name__)

PAID_OFF_EPSILON = 1e-9


@dataclass
class _LoanState:
    """Mutable per-loan state, local to one simulation run."""

    order: int
    prop: SnowballProperty
    balance: float
    interest_paid: float = 0.0

    @property
    def monthly_rate(self) -> float:
        return self.prop.interest_rate_pct / 100.0 / 12.0


def add_months(start: date, months: int) -> date:
    """Calendar date ``months`` after ``start`` (end-of-month safe)."""
    return (pd.Timestamp(start) + pd.DateOffset(months=months)).date()


def _priority_key(strategy: SnowballStrategy):
    # Fixed order: the target only changes when a loan is paid off.
    # Input order breaks ties.
    if strategy == SnowballStrategy.SMALLEST_BALANCE:
        return lambda loan: (loan.prop.debt, loan.order)
    return lambda loan: (-loan.prop.interest_rate_pct, loan.order)


class SnowballSimulator:
    """Debt-snowball engine."""

    def __init__(self, settings: EngineSettings | None = None):
        self.settings = settings or get_settings()

    def simulate(
        self,
        properties: list[SnowballProperty],
        extra_monthly_payment: float = 0.0,
        strategy: SnowballStrategy | str = SnowballStrategy.SMALLEST_BALANCE,
        start_date: date | None = None,
        reinvest_cashflow: bool = False,
    ) -> SnowballSummary:
        """Simulate the payoff of all loans.

        Args:
            properties: Loan state per property
            extra_monthly_payment: Budget on top of the scheduled payments
            strategy: "smallest" (remaining balance) or "highest_interest"
            start_date: Month 0; defaults to today
            reinvest_cashflow: Add every property's positive net cashflow
                to the extra budget from the first month

        Returns:
            SnowballSummary with results in payoff order

        Raises:
            InvalidParameterError: Unknown strategy or negative extra budget
        """
        try:
            strategy = SnowballStrategy(strategy)
        except ValueError as e:
            raise InvalidParameterError(
                "strategy", strategy, f"expected one of {[s.value for s in SnowballStrategy]}"
            ) from e
        if extra_monthly_payment < 0:
            raise InvalidParameterError("extra_monthly_payment", extra_monthly_payment, "must be >= 0")

        start_date = start_date or date.today()
        key = _priority_key(strategy)

        excluded = [p.id for p in properties if p.debt <= 0 or p.monthly_payment <= 0]
        active = [
            _LoanState(order=i, prop=p, balance=p.debt)
            for i, p in enumerate(properties)
            if p.debt > 0 and p.monthly_payment > 0
        ]
        if excluded:
            log.debug("snowball_loans_excluded", ids=excluded)

        budget = extra_monthly_payment
        if reinvest_cashflow:
            budget += sum(max(0.0, p.net_cashflow) for p in properties)

        results: list[SnowballResult] = []
        total_interest = 0.0
        month = 0

        while active and month < self.settings.snowball_max_months:
            month += 1
            target = min(active, key=key)

            for loan in active:
                interest = loan.balance * loan.monthly_rate
                loan.interest_paid += interest
                payment = loan.prop.monthly_payment
                if loan is target:
                    payment += budget
                loan.balance = loan.balance + interest - payment

            freed = 0.0
            still_active = []
            for loan in active:
                if loan.balance <= PAID_OFF_EPSILON:
                    results.append(self._result(loan, month, start_date))
                    total_interest += loan.interest_paid
                    freed += loan.prop.monthly_payment
                else:
                    still_active.append(loan)

            active = still_active
            # Available from next month
            budget += freed

        for loan in sorted(active, key=key):
            total_interest += loan.interest_paid
            results.append(SnowballResult(
                property_id=loan.prop.id,
                property_name=loan.prop.name,
                months_to_payoff=None,
                payoff_date=None,
                interest_paid=round(loan.interest_paid, 2),
            ))

        if active:
            log.warning(
                "snowball_month_cap_reached",
                cap=self.settings.snowball_max_months,
                unpaid=[loan.prop.id for loan in active],
            )

        log.debug(
            "snowball_simulated",
            strategy=strategy.value,
            loans=len(results),
            months=month,
            extra=extra_monthly_payment,
        )

        return SnowballSummary(
            strategy=strategy,
            extra_monthly_payment=extra_monthly_payment,
            results=tuple(results),
            excluded_ids=tuple(excluded),
            months_simulated=month,
            total_interest=round(total_interest, 2),
        )

    @staticmethod
    def _result(loan: _LoanState, month: int, start_date: date) -> SnowballResult:
        return SnowballResult(
            property_id=loan.prop.id,
            property_name=loan.prop.name,
            months_to_payoff=month,
            payoff_date=add_months(start_date, month),
            interest_paid=round(loan.interest_paid, 2),
        )


def simulate_snowball(
    properties: list[SnowballProperty],
    extra_monthly_payment: float = 0.0,
    strategy: SnowballStrategy | str = SnowballStrategy.SMALLEST_BALANCE,
    start_date: date | None = None,
    reinvest_cashflow: bool = False,
    settings: EngineSettings | None = None,
) -> SnowballSummary:
    """Convenience wrapper around SnowballSimulator."""
    return SnowballSimulator(settings).simulate(
        properties,
        extra_monthly_payment=extra_monthly_payment,
        strategy=strategy,
        start_date=start_date,
        reinvest_cashflow=reinvest_cashflow,
    )


def snowball_impact(
    existing: list[SnowballProperty],
    new_property: SnowballProperty,
    extra_monthly_payment: float = 0.0,
    strategy: SnowballStrategy | str = SnowballStrategy.SMALLEST_BALANCE,
    settings: EngineSettings | None = None,
) -> SnowballImpact:
    """Compare debt-free time with and without a candidate property.

    Net cashflows are reinvested in both runs, so a cash-positive purchase
    can shorten the path to debt freedom.
    """
    simulator = SnowballSimulator(settings)
    start = date.today()
    without = simulator.simulate(
        existing, extra_monthly_payment, strategy, start_date=start, reinvest_cashflow=True
    )
    with_new = simulator.simulate(
        [*existing, new_property], extra_monthly_payment, strategy, start_date=start, reinvest_cashflow=True
    )

    months_without = without.debt_free_months
    months_with = with_new.debt_free_months
    saved = None
    if months_without is not None and months_with is not None:
        saved = months_without - months_with

    return SnowballImpact(
        months_without=months_without,
        months_with=months_with,
        months_saved=saved,
        new_property_cashflow_positive=new_property.net_cashflow > 0,
    )
