"""Financial calculation functions.

Core loan and amortization calculations for property investments.
"""

from __future__ import annotations

import numpy_financial as npf
import pandas as pd


def calculate_monthly_payment(
    principal: float,
    annual_rate_pct: float,
    years: float,
) -> float:
    """Calculate the fixed monthly loan payment (principal + interest).

    Financing is optional everywhere, so a missing loan yields no debt
    service instead of an error.

    Args:
        principal: Loan amount in €
        annual_rate_pct: Nominal annual interest rate as percentage (e.g., 3.5 for 3.5%)
        years: Loan term in years

    Returns:
        Monthly payment amount in €
    """
    if principal <= 0 or years <= 0:
        return 0.0

    n_months = years * 12
    monthly_rate = (annual_rate_pct / 100.0) / 12.0

    if monthly_rate <= 0:
        return principal / n_months

    return float(-npf.pmt(monthly_rate, n_months, principal))


def calculate_remaining_balance(
    principal: float,
    annual_rate_pct: float,
    years: float,
    months_elapsed: int,
) -> float:
    """Calculate the outstanding principal after N whole monthly payments.

    Args:
        principal: Initial loan amount in €
        annual_rate_pct: Annual interest rate %
        years: Original loan term in years
        months_elapsed: Number of payments already made

    Returns:
        Remaining balance in €, clamped to [0, principal]
    """
    if principal <= 0 or years <= 0:
        return 0.0

    duration_months = years * 12
    if months_elapsed <= 0:
        return principal
    if months_elapsed >= duration_months:
        return 0.0

    monthly_rate = (annual_rate_pct / 100.0) / 12.0

    if monthly_rate <= 0:
        remaining = principal * (1 - months_elapsed / duration_months)
    else:
        # Balance = P * [(1+r)^n - (1+r)^p] / [(1+r)^n - 1]
        factor_n = (1 + monthly_rate) ** duration_months
        factor_p = (1 + monthly_rate) ** months_elapsed
        remaining = principal * (factor_n - factor_p) / (factor_n - 1)

    return min(principal, max(0.0, remaining))


def generate_amortization_schedule(
    principal: float,
    annual_rate_pct: float,
    years: int,
) -> pd.DataFrame:
    """Generate the month-by-month amortization schedule.

    Args:
        principal: Loan amount in €
        annual_rate_pct: Annual interest rate %
        years: Loan term in years

    Returns:
        DataFrame with columns month, payment, interest, principal, balance.
        Empty (with the same columns) when there is no loan.
    """
    columns = ["month", "payment", "interest", "principal", "balance"]
    if principal <= 0 or years <= 0:
        return pd.DataFrame(columns=columns)

    monthly_rate = max(0.0, (annual_rate_pct / 100.0) / 12.0)
    pmt = calculate_monthly_payment(principal, annual_rate_pct, years)

    rows = []
    balance = principal
    for month in range(1, int(years * 12) + 1):
        interest = balance * monthly_rate
        principal_payment = min(balance, pmt - interest)
        balance = max(0.0, balance - principal_payment)
        rows.append({
            "month": month,
            "payment": round(interest + principal_payment, 2),
            "interest": round(interest, 2),
            "principal": round(principal_payment, 2),
            "balance": round(balance, 2),
        })

    return pd.DataFrame(rows, columns=columns)


def total_interest(principal: float, annual_rate_pct: float, years: int) -> float:
    """Total interest paid over the full term of the loan."""
    pmt = calculate_monthly_payment(principal, annual_rate_pct, years)
    if pmt <= 0:
        return 0.0
    return max(0.0, pmt * years * 12 - principal)
