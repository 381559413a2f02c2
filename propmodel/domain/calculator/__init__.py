"""Pure calculators: amortization, tax regimes and IRR."""

from .financial import calculate_monthly_payment, calculate_remaining_balance
from .irr import solve_irr
from .tax import calculate_property_tax, calculate_transfer_tax, rental_income_tax_rate

__all__ = [
    "calculate_monthly_payment",
    "calculate_remaining_balance",
    "solve_irr",
    "calculate_transfer_tax",
    "calculate_property_tax",
    "rental_income_tax_rate",
]
