"""
Values -- Immutable payroll domain value objects.

Responsibility:
    The closed enumerations used by every engine (Bracket,
    ContributionCategory, ContributionScheme) and the read-only snapshots
    of employee, contract and monthly variable data that callers pass into
    the engine.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Snapshots are frozen; the engine never mutates its inputs.
    - Snapshots keep the caller's raw numeric values.  Normalization to
      Decimal happens in the payslip orchestrator so that failures can be
      reported with the employee id and period attached.

Non-goals:
    - Does NOT load employees or contracts from storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from payroll_kernel.domain.decimals import DecimalLike

FULL_TIME_WEEKLY_HOURS = Decimal("35")

# 35h x 52 weeks / 12 months
DEFAULT_MONTHLY_HOURS = Decimal("151.67")


class Bracket(str, Enum):
    """Social-security base a contribution is assessed on."""

    TOTAL = "TOTAL"  # Full gross salary
    TRANCHE_1 = "TRANCHE_1"  # Gross capped at the ceiling
    TRANCHE_2 = "TRANCHE_2"  # Gross between 1x and 8x the ceiling
    CSG_CRDS = "CSG_CRDS"  # Gross x CSG/CRDS base rate


class ContributionCategory(str, Enum):
    """Grouping used to order and present contribution lines."""

    CSG_CRDS = "CSG_CRDS"
    SECURITE_SOCIALE = "SECURITE_SOCIALE"
    RETRAITE = "RETRAITE"
    COMPLEMENTAIRE = "COMPLEMENTAIRE"
    CHOMAGE = "CHOMAGE"
    AUTRES = "AUTRES"


class ContributionScheme(str, Enum):
    """Contribution regime of the employee."""

    ORDINARY = "ordinary"  # Non-cadre
    EXECUTIVE = "executive"  # Cadre

    @classmethod
    def for_employee(cls, is_executive: bool) -> ContributionScheme:
        return cls.EXECUTIVE if is_executive else cls.ORDINARY


@dataclass(frozen=True)
class EmployeeSnapshot:
    """
    Employee attributes as of the calculation.

    gross_monthly_salary may be None when the salary is carried by the
    contract only.
    """

    employee_id: str
    gross_monthly_salary: DecimalLike | None
    working_hours: DecimalLike = FULL_TIME_WEEKLY_HOURS  # Weekly hours
    is_executive: bool = False
    tax_rate: DecimalLike = Decimal("0")  # Percentage (e.g. 7.5 for 7.5%)

    @property
    def scheme(self) -> ContributionScheme:
        return ContributionScheme.for_employee(self.is_executive)


@dataclass(frozen=True)
class ContractSnapshot:
    """Employment contract terms overriding the employee record."""

    start_date: date
    monthly_gross_salary: DecimalLike | None
    end_date: date | None = None
    part_time: bool = False
    part_time_hours: DecimalLike | None = None  # Weekly hours

    def covers(self, period: date) -> bool:
        """True if the contract is in force on ``period`` (bounds inclusive)."""
        if period < self.start_date:
            return False
        if self.end_date is not None and period > self.end_date:
            return False
        return True


@dataclass(frozen=True)
class MonthlyInputs:
    """Variable pay entered for the month."""

    overtime_hours_25: DecimalLike = Decimal("0")  # Paid at 125%
    overtime_hours_50: DecimalLike = Decimal("0")  # Paid at 150%
    bonuses: DecimalLike = Decimal("0")
