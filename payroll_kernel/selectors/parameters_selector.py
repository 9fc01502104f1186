"""
Module: payroll_kernel.selectors.parameters_selector
Responsibility: Read-only access to the stored payroll parameter versions.
    Implements the ParametersSource protocol against the database.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - The filter is the same as the in-memory resolver: active, effective on
      or before the period, end_date unset or on/after the period.  The most
      recent effective_date wins.
    - Returns PayrollParameters DTOs, never ORM rows.

Failure modes:
    - ParametersNotFoundError when no stored version covers the period.
"""

from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from payroll_kernel.domain.parameters import PayrollParameters
from payroll_kernel.exceptions import ParametersNotFoundError
from payroll_kernel.logging_config import get_logger
from payroll_kernel.models.payroll_parameters import PayrollParametersRecord
from payroll_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.parameters")


class PayrollParametersSelector(BaseSelector[PayrollParametersRecord]):
    """
    Selector for payroll parameter queries.

    Guarantees:
        - Read-only.
        - Rate lines are eagerly loaded and kept in position order.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def find_effective(self, period: date) -> PayrollParameters:
        """
        Return the parameters in force for ``period``.

        Raises:
            ParametersNotFoundError: If no active version covers the period.
        """
        stmt = (
            select(PayrollParametersRecord)
            .where(
                PayrollParametersRecord.effective_date <= period,
                or_(
                    PayrollParametersRecord.end_date.is_(None),
                    PayrollParametersRecord.end_date >= period,
                ),
                PayrollParametersRecord.is_active.is_(True),
            )
            .order_by(PayrollParametersRecord.effective_date.desc())
            .limit(1)
        )
        record = self.session.execute(stmt).scalars().first()
        if record is None:
            logger.error("parameters_not_found", extra={"period": period.isoformat()})
            raise ParametersNotFoundError(period)

        logger.debug("parameters_resolved", extra={
            "period": period.isoformat(),
            "effective_date": record.effective_date.isoformat(),
            "parameters_id": str(record.id),
        })
        return record.to_domain()

    def list_all(self, include_inactive: bool = False) -> list[PayrollParameters]:
        """All stored versions ordered by effective_date."""
        stmt = select(PayrollParametersRecord).order_by(
            PayrollParametersRecord.effective_date
        )
        if not include_inactive:
            stmt = stmt.where(PayrollParametersRecord.is_active.is_(True))
        return [r.to_domain() for r in self.session.execute(stmt).scalars()]
