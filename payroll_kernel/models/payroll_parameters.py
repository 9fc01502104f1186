"""
Module: payroll_kernel.models.payroll_parameters
Responsibility: ORM persistence for the time-versioned payroll parameter
    table and its contribution rate lines.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/ (for conversion to and from DTOs).

Invariants enforced:
    - Rate lines are ordered by ``position``; that order is the order of
      the contribution lines on the payslip.
    - (parameters_id, code) is unique.

Non-goals:
    - This model does NOT enforce non-overlapping date ranges; overlaps are
      legal and resolved by most recent effective_date.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import Base, UUIDString
from payroll_kernel.domain.parameters import ContributionRule, PayrollParameters
from payroll_kernel.domain.values import ContributionScheme


class PayrollParametersRecord(Base):
    """One version of the regulatory payroll parameters."""

    __tablename__ = "payroll_parameters"

    __table_args__ = (
        Index("idx_payroll_parameters_dates", "effective_date", "end_date"),
    )

    effective_date: Mapped[date] = mapped_column(nullable=False)
    end_date: Mapped[date | None] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Monthly plafond de la sécurité sociale
    social_security_ceiling: Mapped[Decimal] = mapped_column(nullable=False)
    csg_crds_base_rate: Mapped[Decimal] = mapped_column(nullable=False)

    label: Mapped[str | None] = mapped_column(String(100), nullable=True)

    rates: Mapped[list[ContributionRateRecord]] = relationship(
        back_populates="parameters",
        order_by="ContributionRateRecord.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @classmethod
    def from_domain(cls, params: PayrollParameters) -> PayrollParametersRecord:
        return cls(
            effective_date=params.effective_date,
            end_date=params.end_date,
            is_active=params.is_active,
            social_security_ceiling=params.social_security_ceiling,
            csg_crds_base_rate=params.csg_crds_base_rate,
            label=params.label,
            rates=[
                ContributionRateRecord.from_domain(rule, position)
                for position, rule in enumerate(params.contribution_rules)
            ],
        )

    def to_domain(self) -> PayrollParameters:
        return PayrollParameters(
            effective_date=self.effective_date,
            end_date=self.end_date,
            is_active=self.is_active,
            social_security_ceiling=self.social_security_ceiling,
            csg_crds_base_rate=self.csg_crds_base_rate,
            contribution_rules=tuple(rate.to_domain() for rate in self.rates),
            label=self.label,
        )

    def __repr__(self) -> str:
        return (
            f"<PayrollParametersRecord {self.effective_date}..{self.end_date} "
            f"ceiling={self.social_security_ceiling}>"
        )


class ContributionRateRecord(Base):
    """One contribution line of a parameter version's rate table."""

    __tablename__ = "payroll_contribution_rates"

    __table_args__ = (
        UniqueConstraint("parameters_id", "code", name="uq_contribution_rate_code"),
    )

    parameters_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("payroll_parameters.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    code: Mapped[str] = mapped_column(String(50), nullable=False)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    bracket: Mapped[str] = mapped_column(String(20), nullable=False)

    # Percentages, e.g. 6.9 for 6.9%
    employee_rate: Mapped[Decimal] = mapped_column(nullable=False)
    employer_rate: Mapped[Decimal] = mapped_column(nullable=False)

    # Comma-separated ContributionScheme values
    schemes: Mapped[str] = mapped_column(String(100), nullable=False)

    deductible: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    skip_when_base_is_zero: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    parameters: Mapped[PayrollParametersRecord] = relationship(back_populates="rates")

    @classmethod
    def from_domain(cls, rule: ContributionRule, position: int) -> ContributionRateRecord:
        return cls(
            position=position,
            code=rule.code,
            label=rule.label,
            category=rule.category.value,
            bracket=rule.bracket.value,
            employee_rate=rule.employee_rate,
            employer_rate=rule.employer_rate,
            schemes=",".join(sorted(s.value for s in rule.schemes)),
            deductible=rule.deductible,
            skip_when_base_is_zero=rule.skip_when_base_is_zero,
        )

    def to_domain(self) -> ContributionRule:
        return ContributionRule(
            code=self.code,
            label=self.label,
            category=self.category,
            bracket=self.bracket,
            employee_rate=self.employee_rate,
            employer_rate=self.employer_rate,
            schemes=frozenset(
                ContributionScheme(s) for s in self.schemes.split(",") if s
            ),
            deductible=self.deductible,
            skip_when_base_is_zero=self.skip_when_base_is_zero,
        )
