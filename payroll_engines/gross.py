"""
Gross Salary Engine - Monthly gross from base salary and variable pay.

Responsibility:
    Derives the monthly gross from the base salary, paid overtime and
    bonuses, and provides the part-time pro-rata helper.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Hourly rate = base salary / 151.67 legal monthly hours.
    - Overtime is paid at 125% and 150% of the hourly rate.  Each overtime
      amount is rounded to the cent, as paid; the base salary and bonuses
      are never rounded.
    - Without overtime or bonuses the gross is the base salary, unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_kernel.domain.decimals import (
    ZERO,
    DecimalLike,
    round_decimal,
    to_non_negative_decimal,
)
from payroll_kernel.domain.values import (
    DEFAULT_MONTHLY_HOURS,
    FULL_TIME_WEEKLY_HOURS,
    MonthlyInputs,
)
from payroll_kernel.exceptions import ValidationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.gross")

OVERTIME_25_MULTIPLIER = Decimal("1.25")
OVERTIME_50_MULTIPLIER = Decimal("1.5")


@dataclass(frozen=True)
class GrossSalaryBreakdown:
    """Components of the monthly gross."""

    base_salary: Decimal
    overtime_25_hours: Decimal = ZERO
    overtime_25_amount: Decimal = ZERO
    overtime_50_hours: Decimal = ZERO
    overtime_50_amount: Decimal = ZERO
    bonuses: Decimal = ZERO
    hourly_rate: Decimal | None = None

    @property
    def overtime_amount(self) -> Decimal:
        return self.overtime_25_amount + self.overtime_50_amount

    @property
    def total(self) -> Decimal:
        return self.base_salary + self.overtime_amount + self.bonuses


def calculate_hourly_rate(
    base_salary: DecimalLike,
    monthly_hours: DecimalLike = DEFAULT_MONTHLY_HOURS,
) -> Decimal:
    """Base salary divided by the legal monthly hours."""
    salary = to_non_negative_decimal(base_salary, "base_salary")
    hours = to_non_negative_decimal(monthly_hours, "monthly_hours")
    if hours == ZERO:
        raise ValidationError("monthly_hours", monthly_hours, "must be positive")
    return salary / hours


def calculate_gross_salary(
    base_salary: DecimalLike,
    monthly_inputs: MonthlyInputs | None = None,
    monthly_hours: DecimalLike = DEFAULT_MONTHLY_HOURS,
) -> GrossSalaryBreakdown:
    """
    Compute the monthly gross.

    Args:
        base_salary: Monthly base salary.
        monthly_inputs: Overtime hours and bonuses for the month, if any.
        monthly_hours: Hours the base salary pays for.

    Returns:
        GrossSalaryBreakdown whose ``total`` is the gross salary.

    Raises:
        ValidationError: Negative or non-numeric input.
    """
    salary = to_non_negative_decimal(base_salary, "base_salary")
    if monthly_inputs is None:
        return GrossSalaryBreakdown(base_salary=salary)

    hours_25 = to_non_negative_decimal(monthly_inputs.overtime_hours_25, "overtime_hours_25")
    hours_50 = to_non_negative_decimal(monthly_inputs.overtime_hours_50, "overtime_hours_50")
    bonuses = to_non_negative_decimal(monthly_inputs.bonuses, "bonuses")

    hourly_rate = calculate_hourly_rate(salary, monthly_hours)
    amount_25 = round_decimal(hourly_rate * OVERTIME_25_MULTIPLIER * hours_25)
    amount_50 = round_decimal(hourly_rate * OVERTIME_50_MULTIPLIER * hours_50)

    breakdown = GrossSalaryBreakdown(
        base_salary=salary,
        overtime_25_hours=hours_25,
        overtime_25_amount=amount_25,
        overtime_50_hours=hours_50,
        overtime_50_amount=amount_50,
        bonuses=bonuses,
        hourly_rate=hourly_rate,
    )
    logger.debug("gross_salary_calculated", extra={
        "base_salary": str(salary),
        "overtime_amount": str(breakdown.overtime_amount),
        "bonuses": str(bonuses),
        "gross_salary": str(breakdown.total),
    })
    return breakdown


def calculate_pro_rata_salary(
    full_time_salary: DecimalLike,
    contract_hours: DecimalLike,
    full_time_hours: DecimalLike = FULL_TIME_WEEKLY_HOURS,
) -> Decimal:
    """
    Salary for a part-time contract: full-time salary x hours / 35.

    Unrounded.  Contract hours above full time are not capped.
    """
    salary = to_non_negative_decimal(full_time_salary, "full_time_salary")
    hours = to_non_negative_decimal(contract_hours, "contract_hours")
    reference = to_non_negative_decimal(full_time_hours, "full_time_hours")
    if reference == ZERO:
        raise ValidationError("full_time_hours", full_time_hours, "must be positive")
    return salary * hours / reference
