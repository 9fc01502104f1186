"""
Contributions Engine - Employee and employer contribution amounts.

Applies a percentage rate to a bracket base, once per share, and builds the
payslip contribution lines from the configured rate table.

    amount = base x rate / 100

Amounts are exact and unrounded; a zero base or a zero rate gives exactly
zero.  Pure functions with no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.brackets import BracketBases
from payroll_kernel.domain.decimals import (
    ZERO,
    DecimalLike,
    percent_of,
    to_non_negative_decimal,
)
from payroll_kernel.domain.parameters import ContributionRule
from payroll_kernel.domain.values import Bracket, ContributionCategory, ContributionScheme
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.contributions")


@dataclass(frozen=True)
class ContributionLine:
    """
    One row of the payslip contribution breakdown.

    Immutable value object created fresh per calculation.
    """

    code: str
    category: ContributionCategory
    label: str
    base_type: Bracket
    base_amount: Decimal
    employee_rate: Decimal  # Percentage
    employer_rate: Decimal  # Percentage
    employee_amount: Decimal
    employer_amount: Decimal

    # Employee share reduces taxable income
    deductible: bool = True

    @property
    def total_amount(self) -> Decimal:
        return self.employee_amount + self.employer_amount


def calculate_contribution_amount(base: DecimalLike, rate_percent: DecimalLike) -> Decimal:
    """
    Apply a percentage rate to a base.

    Preconditions:
        - base and rate_percent are non-negative.

    Postconditions:
        - Returns base x rate_percent / 100, unrounded.
        - Returns exactly Decimal("0") when either operand is zero.

    Raises:
        ValidationError: Negative or non-numeric operand.
    """
    amount_base = to_non_negative_decimal(base, "base")
    rate = to_non_negative_decimal(rate_percent, "rate_percent")
    if amount_base == ZERO or rate == ZERO:
        return ZERO
    return percent_of(amount_base, rate)


def rules_for_scheme(
    rules: Iterable[ContributionRule],
    scheme: ContributionScheme,
) -> tuple[ContributionRule, ...]:
    """Rules applicable to ``scheme``, keeping their configured order."""
    return tuple(rule for rule in rules if rule.applies_to(scheme))


def build_contribution_line(
    rule: ContributionRule,
    bases: BracketBases,
) -> ContributionLine | None:
    """
    Build the contribution line for one rule.

    Returns None when the rule is flagged skip_when_base_is_zero and its
    base is zero (Tranche 2 lines for salaries under the ceiling).
    """
    base = bases.for_bracket(rule.bracket)
    if rule.skip_when_base_is_zero and base == ZERO:
        logger.debug("contribution_line_skipped", extra={
            "code": rule.code,
            "bracket": rule.bracket.value,
        })
        return None

    return ContributionLine(
        code=rule.code,
        category=rule.category,
        label=rule.label,
        base_type=rule.bracket,
        base_amount=base,
        employee_rate=rule.employee_rate,
        employer_rate=rule.employer_rate,
        employee_amount=calculate_contribution_amount(base, rule.employee_rate),
        employer_amount=calculate_contribution_amount(base, rule.employer_rate),
        deductible=rule.deductible,
    )


def build_contribution_lines(
    rules: Iterable[ContributionRule],
    bases: BracketBases,
) -> tuple[ContributionLine, ...]:
    """Build the lines for every rule, dropping skipped ones."""
    lines = (build_contribution_line(rule, bases) for rule in rules)
    return tuple(line for line in lines if line is not None)
