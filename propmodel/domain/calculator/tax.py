"""Portuguese property tax rules.

Table-driven, pure lookups for:
    - IMT: one-time transfer tax at purchase
    - IMI: annual municipal property tax on the cadastral value (VPT)
    - IRS: rental income tax, old regime (contract duration) and the
      2026-2029 regime (monthly rent threshold)
    - Mais-valias: capital gains tax at sale
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PropertyUse(str, Enum):
    """Property use category for IMT."""

    RESIDENTIAL = "residential"
    NON_RESIDENTIAL = "non_residential"


class Municipality(str, Enum):
    """Municipality type driving the default IMI rate."""

    STANDARD = "standard"
    LARGE_CITY = "large_city"
    RURAL = "rural"


class RentalTaxRegime(str, Enum):
    OLD = "old"
    NEW = "new"
    UNKNOWN = "unknown"


# --- IMT ---

# (upper bound inclusive, marginal rate %) for residential property.
# A value exactly on a bound belongs to the lower bracket.
IMT_RESIDENTIAL_BRACKETS: tuple[tuple[float, float], ...] = (
    (106_346.0, 0.0),
    (145_470.0, 2.0),
    (198_347.0, 5.0),
    (330_539.0, 7.0),
    (633_453.0, 8.0),
)

# Above the last marginal bracket a single rate applies to the whole value.
IMT_RESIDENTIAL_SINGLE_RATES: tuple[tuple[float, float], ...] = (
    (1_102_920.0, 6.0),
    (float("inf"), 7.5),
)

IMT_NON_RESIDENTIAL_RATE_PCT = 6.5

# --- IMI ---

IMI_RATES_PCT: dict[Municipality, float] = {
    Municipality.STANDARD: 0.5,
    Municipality.LARGE_CITY: 0.45,
    Municipality.RURAL: 0.3,
}

# --- IRS ---

NEW_REGIME_FIRST_YEAR = 2026
NEW_REGIME_LAST_YEAR = 2029
NEW_REGIME_RENT_THRESHOLD = 2_300.0
NEW_REGIME_REDUCED_RATE_PCT = 10.0
NEW_REGIME_STANDARD_RATE_PCT = 25.0
AGGREGATED_ESTIMATE_RATE_PCT = 30.0
POST_REGIME_RATE_PCT = 25.0

# (contract years strictly below, rate %); the last entry is the floor.
OLD_REGIME_DURATION_RATES: tuple[tuple[float, float], ...] = (
    (2.0, 28.0),
    (5.0, 25.0),
    (10.0, 15.0),
    (20.0, 10.0),
    (float("inf"), 5.0),
)
RENEWAL_DISCOUNT_PCT = 2.0
RENEWAL_FLOOR_PCT = 5.0
LONG_DURATION_CONTRACT_DISCOUNT = 0.20

# --- Mais-valias ---

CAPITAL_GAINS_RATE_PCT = 28.0
RESIDENT_TAXABLE_SHARE = 0.5


@dataclass(frozen=True)
class TransferTaxResult:
    """IMT liability with the rates that produced it."""

    amount: float
    marginal_rate_pct: float
    average_rate_pct: float
    single_rate: bool


@dataclass(frozen=True)
class PropertyTaxResult:
    """Annual IMI liability."""

    annual_amount: float
    monthly_amount: float
    rate_pct: float


@dataclass(frozen=True)
class RentalTaxResult:
    """Rental income tax for one year of rent."""

    annual_amount: float
    monthly_amount: float
    gross_annual_rent: float
    net_annual_rent: float
    rate_pct: float
    regime: RentalTaxRegime
    savings_vs_standard: float = 0.0


def transfer_tax_breakdown(
    value: float,
    use: PropertyUse = PropertyUse.NON_RESIDENTIAL,
) -> TransferTaxResult:
    """Compute IMT with marginal and average rates.

    Args:
        value: Transaction value in €
        use: Residential (progressive) or non-residential (flat)

    Returns:
        TransferTaxResult
    """
    if value <= 0:
        return TransferTaxResult(0.0, 0.0, 0.0, False)

    if use == PropertyUse.NON_RESIDENTIAL:
        amount = value * IMT_NON_RESIDENTIAL_RATE_PCT / 100.0
        return TransferTaxResult(
            amount=round(amount, 2),
            marginal_rate_pct=IMT_NON_RESIDENTIAL_RATE_PCT,
            average_rate_pct=IMT_NON_RESIDENTIAL_RATE_PCT,
            single_rate=True,
        )

    progressive_ceiling = IMT_RESIDENTIAL_BRACKETS[-1][0]
    if value > progressive_ceiling:
        rate = next(r for bound, r in IMT_RESIDENTIAL_SINGLE_RATES if value <= bound)
        amount = value * rate / 100.0
        return TransferTaxResult(
            amount=round(amount, 2),
            marginal_rate_pct=rate,
            average_rate_pct=rate,
            single_rate=True,
        )

    amount = 0.0
    marginal = 0.0
    lower = 0.0
    for upper, rate in IMT_RESIDENTIAL_BRACKETS:
        if value > lower:
            amount += (min(value, upper) - lower) * rate / 100.0
            marginal = rate
        lower = upper

    return TransferTaxResult(
        amount=round(amount, 2),
        marginal_rate_pct=marginal,
        average_rate_pct=round(amount / value * 100.0, 4),
        single_rate=False,
    )


def calculate_transfer_tax(
    value: float,
    use: PropertyUse = PropertyUse.NON_RESIDENTIAL,
) -> float:
    """IMT liability in € for a purchase."""
    return transfer_tax_breakdown(value, use).amount


def estimate_cadastral_value(purchase_price: float, pct: float = 60.0) -> float:
    """Estimate the VPT, typically 50-70% of market value."""
    return round(max(0.0, purchase_price) * pct / 100.0, 2)


def calculate_property_tax(
    cadastral_value: float,
    municipality: Municipality = Municipality.STANDARD,
    rate_pct: float | None = None,
) -> PropertyTaxResult:
    """Annual IMI on the cadastral value.

    Args:
        cadastral_value: VPT in €
        municipality: Selects the default rate when ``rate_pct`` is None
        rate_pct: Explicit municipal rate %

    Returns:
        PropertyTaxResult
    """
    if cadastral_value <= 0:
        return PropertyTaxResult(0.0, 0.0, 0.0)

    rate = IMI_RATES_PCT[municipality] if rate_pct is None else rate_pct
    annual = cadastral_value * rate / 100.0
    return PropertyTaxResult(
        annual_amount=round(annual, 2),
        monthly_amount=round(annual / 12.0, 2),
        rate_pct=rate,
    )


def _old_regime_rate(contract_years: float, renewals: int) -> float:
    rate = next(r for below, r in OLD_REGIME_DURATION_RATES if contract_years < below)
    if 5.0 <= contract_years < 10.0:
        rate = max(RENEWAL_FLOOR_PCT, rate - renewals * RENEWAL_DISCOUNT_PCT)
    return rate


def rental_income_tax_rate(
    year: int,
    contract_years: float = 1.0,
    monthly_rent: float = 0.0,
    renewals: int = 0,
    aggregated: bool = False,
    long_duration_contract: bool = False,
) -> tuple[float, RentalTaxRegime]:
    """Rental income tax rate for a given tax year.

    In the 2026-2029 window the rate depends on the monthly rent (a rent
    exactly on the threshold gets the reduced rate). Before that window the
    rate steps down with contract duration. From 2030 onward the regime is
    unknown and the standard rate is assumed.

    Returns:
        Tuple of (rate %, regime)
    """
    if year > NEW_REGIME_LAST_YEAR:
        return POST_REGIME_RATE_PCT, RentalTaxRegime.UNKNOWN

    if year >= NEW_REGIME_FIRST_YEAR:
        if aggregated:
            return AGGREGATED_ESTIMATE_RATE_PCT, RentalTaxRegime.NEW
        if monthly_rent <= NEW_REGIME_RENT_THRESHOLD:
            return NEW_REGIME_REDUCED_RATE_PCT, RentalTaxRegime.NEW
        return NEW_REGIME_STANDARD_RATE_PCT, RentalTaxRegime.NEW

    rate = _old_regime_rate(contract_years, renewals)
    if long_duration_contract:
        rate = rate * (1.0 - LONG_DURATION_CONTRACT_DISCOUNT)
    return round(rate, 2), RentalTaxRegime.OLD


def calculate_rental_income_tax(
    year: int,
    monthly_rent: float,
    contract_years: float = 1.0,
    renewals: int = 0,
    aggregated: bool = False,
    long_duration_contract: bool = False,
) -> RentalTaxResult:
    """Absolute rental income tax liability for one year of rent."""
    gross = monthly_rent * 12.0
    if gross <= 0:
        return RentalTaxResult(0.0, 0.0, 0.0, 0.0, 0.0, RentalTaxRegime.UNKNOWN)

    rate, regime = rental_income_tax_rate(
        year,
        contract_years=contract_years,
        monthly_rent=monthly_rent,
        renewals=renewals,
        aggregated=aggregated,
        long_duration_contract=long_duration_contract,
    )
    tax = gross * rate / 100.0

    savings = 0.0
    if regime == RentalTaxRegime.NEW and rate == NEW_REGIME_REDUCED_RATE_PCT:
        savings = gross * (NEW_REGIME_STANDARD_RATE_PCT - rate) / 100.0

    return RentalTaxResult(
        annual_amount=round(tax, 2),
        monthly_amount=round(tax / 12.0, 2),
        gross_annual_rent=round(gross, 2),
        net_annual_rent=round(gross - tax, 2),
        rate_pct=rate,
        regime=regime,
        savings_vs_standard=round(savings, 2),
    )


def calculate_capital_gains_tax(
    sale_price: float,
    purchase_price: float,
    resident: bool = False,
) -> float:
    """Mais-valias on a sale: 28% of the gain, half of it for residents."""
    gain = sale_price - purchase_price
    if gain <= 0:
        return 0.0
    taxable = gain * RESIDENT_TAXABLE_SHARE if resident else gain
    return round(taxable * CAPITAL_GAINS_RATE_PCT / 100.0, 2)
