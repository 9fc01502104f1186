"""SQLAlchemy models for the payroll parameter store."""

from payroll_kernel.models.payroll_parameters import (
    ContributionRateRecord,
    PayrollParametersRecord,
)

__all__ = [
    "ContributionRateRecord",
    "PayrollParametersRecord",
]
