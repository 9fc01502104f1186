"""
Formatting helpers - Render payslip amounts for display and export.

Amounts are rounded half-up only here, at the presentation boundary, and
rendered with a fixed number of decimal places, a ``.`` decimal separator,
no thousands separator and a trailing euro sign:

    1000      -> "1000.00 €"
    1234.567  -> "1234.57 €"
    -1234.56  -> "-1234.56 €"
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.payslip import PayslipCalculationResult
from payroll_kernel.domain.decimals import (
    MONEY_DECIMAL_PLACES,
    ZERO,
    DecimalLike,
    round_decimal,
    to_decimal,
)

CURRENCY_SYMBOL = "€"


def _fixed(value: DecimalLike, decimals: int) -> str:
    rounded = round_decimal(value, decimals)
    if rounded == ZERO:
        # No "-0.00"
        rounded = abs(rounded)
    return f"{rounded:f}"


def format_decimal(amount: DecimalLike, decimals: int = MONEY_DECIMAL_PLACES) -> str:
    """Render an amount as ``"<value> €"`` with ``decimals`` fixed places."""
    return f"{_fixed(amount, decimals)} {CURRENCY_SYMBOL}"


def format_rate(rate: DecimalLike, decimals: int | None = None) -> str:
    """
    Render a percentage rate as ``"6.90 %"``.

    Without ``decimals``, at least two places are shown, more when the
    rate carries them (``0.036`` renders as ``"0.036 %"``).
    """
    value = to_decimal(rate, "rate")
    if decimals is None:
        decimals = max(MONEY_DECIMAL_PLACES, -value.normalize().as_tuple().exponent)
    return f"{_fixed(value, decimals)} %"


@dataclass(frozen=True)
class PayslipDisplayRow:
    """One contribution line rendered as strings."""

    code: str
    category: str
    label: str
    base: str
    employee_rate: str
    employee_amount: str
    employer_rate: str
    employer_amount: str


def format_payslip_lines(result: PayslipCalculationResult) -> list[PayslipDisplayRow]:
    """Render every contribution line of a payslip, in payslip order."""
    return [
        PayslipDisplayRow(
            code=line.code,
            category=line.category.value,
            label=line.label,
            base=format_decimal(line.base_amount),
            employee_rate=format_rate(line.employee_rate),
            employee_amount=format_decimal(line.employee_amount),
            employer_rate=format_rate(line.employer_rate),
            employer_amount=format_decimal(line.employer_amount),
        )
        for line in result.lines
    ]


def format_payslip_summary(result: PayslipCalculationResult) -> dict[str, str]:
    """Render the payslip totals."""
    totals: dict[str, Decimal] = {
        "gross_salary": result.gross_salary,
        "total_employee_contributions": result.total_employee_contributions,
        "total_employer_contributions": result.total_employer_contributions,
        "net_before_tax": result.net_before_tax,
        "taxable_income": result.taxable_income,
        "tax_amount": result.tax_amount,
        "net_salary": result.net_salary,
        "employer_cost": result.employer_cost,
    }
    return {name: format_decimal(value) for name, value in totals.items()}
