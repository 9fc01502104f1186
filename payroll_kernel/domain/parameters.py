"""
Parameters -- Time-versioned regulatory payroll parameters and their resolution.

Responsibility:
    Defines PayrollParameters (ceiling, CSG/CRDS base rate, contribution
    rate table) and the pure resolver that selects the record in force for
    a pay period from an explicit, caller-supplied collection.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Storage-backed sources (see payroll_kernel.selectors) implement the
    same ParametersSource protocol and return these DTOs.

Invariants enforced:
    - A record applies to ``period`` when it is active, its effective_date
      is on or before ``period`` and its end_date is unset or on/after
      ``period``.
    - When several records apply, the most recent effective_date wins.
    - No applicable record is a hard stop: ParametersNotFoundError.
    - Rates and ceilings are Decimal, normalized on construction.

Failure modes:
    - ParametersNotFoundError when nothing covers the period.
    - InvalidParametersError on construction with a non-positive ceiling,
      a negative rate, or an end_date before the effective_date.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Protocol, runtime_checkable

from payroll_kernel.domain.decimals import ZERO, to_decimal
from payroll_kernel.domain.values import (
    Bracket,
    ContributionCategory,
    ContributionScheme,
)
from payroll_kernel.exceptions import (
    InvalidParametersError,
    ParametersNotFoundError,
    ValidationError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("domain.parameters")

DEFAULT_CSG_CRDS_BASE_RATE = Decimal("0.9825")

ALL_SCHEMES: frozenset[ContributionScheme] = frozenset(ContributionScheme)


def _rate(value, field_name: str) -> Decimal:
    try:
        rate = to_decimal(value, field_name)
    except ValidationError as e:
        raise InvalidParametersError(field_name, e.reason) from e
    if rate < ZERO:
        raise InvalidParametersError(field_name, "must not be negative")
    return rate


@dataclass(frozen=True)
class ContributionRule:
    """
    One configured contribution line of the rate table.

    Rates are percentages: ``6.9`` means 6.9% of the base.
    """

    code: str
    label: str
    category: ContributionCategory
    bracket: Bracket
    employee_rate: Decimal = ZERO
    employer_rate: Decimal = ZERO
    schemes: frozenset[ContributionScheme] = ALL_SCHEMES

    # Employee share reduces taxable income (False for CSG/CRDS non deductible)
    deductible: bool = True

    # Omit the line entirely when its base is zero (Tranche 2 lines)
    skip_when_base_is_zero: bool = False

    def __post_init__(self) -> None:
        if not self.code:
            raise InvalidParametersError("code", "is required")
        try:
            object.__setattr__(self, "category", ContributionCategory(self.category))
            object.__setattr__(self, "bracket", Bracket(self.bracket))
            object.__setattr__(
                self, "schemes", frozenset(ContributionScheme(s) for s in self.schemes)
            )
        except ValueError as e:
            raise InvalidParametersError(self.code, str(e)) from e
        object.__setattr__(
            self, "employee_rate", _rate(self.employee_rate, f"{self.code}.employee_rate")
        )
        object.__setattr__(
            self, "employer_rate", _rate(self.employer_rate, f"{self.code}.employer_rate")
        )
        if not self.schemes:
            raise InvalidParametersError(f"{self.code}.schemes", "must not be empty")

    def applies_to(self, scheme: ContributionScheme) -> bool:
        return scheme in self.schemes


@dataclass(frozen=True)
class PayrollParameters:
    """
    Regulatory parameters in force over a date range.

    Contract:
        Immutable.  Created administratively, looked up read-only.

    Guarantees:
        - social_security_ceiling is a positive Decimal
        - csg_crds_base_rate is a Decimal in (0, 1]
        - contribution_rules keeps the configured order
    """

    effective_date: date
    social_security_ceiling: Decimal
    end_date: date | None = None
    is_active: bool = True
    csg_crds_base_rate: Decimal = DEFAULT_CSG_CRDS_BASE_RATE
    contribution_rules: tuple[ContributionRule, ...] = field(default_factory=tuple)
    label: str | None = None

    def __post_init__(self) -> None:
        ceiling = _rate(self.social_security_ceiling, "social_security_ceiling")
        if ceiling == ZERO:
            raise InvalidParametersError("social_security_ceiling", "must be positive")
        object.__setattr__(self, "social_security_ceiling", ceiling)

        base_rate = _rate(self.csg_crds_base_rate, "csg_crds_base_rate")
        if base_rate == ZERO or base_rate > Decimal("1"):
            raise InvalidParametersError("csg_crds_base_rate", "must be in (0, 1]")
        object.__setattr__(self, "csg_crds_base_rate", base_rate)

        if self.end_date is not None and self.end_date < self.effective_date:
            raise InvalidParametersError(
                "end_date",
                f"{self.end_date.isoformat()} is before effective_date "
                f"{self.effective_date.isoformat()}",
            )

        rules = tuple(self.contribution_rules)
        codes = [r.code for r in rules]
        duplicates = sorted({c for c in codes if codes.count(c) > 1})
        if duplicates:
            raise InvalidParametersError("contribution_rules", f"duplicate codes {duplicates}")
        object.__setattr__(self, "contribution_rules", rules)

    def covers(self, period: date) -> bool:
        """True if this record is active and in force on ``period``."""
        if not self.is_active:
            return False
        if self.effective_date > period:
            return False
        if self.end_date is not None and self.end_date < period:
            return False
        return True

    def rules_for(self, scheme: ContributionScheme) -> tuple[ContributionRule, ...]:
        """Rules applicable to a scheme, in configured order."""
        return tuple(r for r in self.contribution_rules if r.applies_to(scheme))


def resolve_parameters(
    period: date,
    records: Iterable[PayrollParameters],
) -> PayrollParameters:
    """
    Select the parameters in force for ``period``.

    Preconditions:
        - records is any iterable of PayrollParameters (order irrelevant).

    Postconditions:
        - Returns the covering record with the latest effective_date.

    Raises:
        ParametersNotFoundError: If no active record covers the period.
    """
    candidates = sorted(
        (r for r in records if r.covers(period)),
        key=lambda r: r.effective_date,
        reverse=True,
    )
    if not candidates:
        logger.error("parameters_not_found", extra={"period": period.isoformat()})
        raise ParametersNotFoundError(period)

    selected = candidates[0]
    logger.debug("parameters_resolved", extra={
        "period": period.isoformat(),
        "effective_date": selected.effective_date.isoformat(),
        "candidate_count": len(candidates),
        "social_security_ceiling": str(selected.social_security_ceiling),
    })
    return selected


@runtime_checkable
class ParametersSource(Protocol):
    """Anything able to return the parameters in force for a period."""

    def find_effective(self, period: date) -> PayrollParameters:
        """Return the parameters for ``period`` or raise ParametersNotFoundError."""
        ...


class InMemoryParametersSource:
    """ParametersSource over an explicit, already-loaded collection."""

    def __init__(self, records: Iterable[PayrollParameters]):
        self._records: tuple[PayrollParameters, ...] = tuple(records)

    @property
    def records(self) -> Sequence[PayrollParameters]:
        return self._records

    def find_effective(self, period: date) -> PayrollParameters:
        return resolve_parameters(period, self._records)
