"""
Pure domain layer.

Value objects, decimal arithmetic and parameter resolution with NO
dependencies on the ORM, the database, the clock or any I/O.

All domain objects are immutable and deterministic.
"""

from payroll_kernel.domain.decimals import (
    DecimalLike,
    compare,
    multiply,
    round_decimal,
    to_decimal,
    to_non_negative_decimal,
)
from payroll_kernel.domain.parameters import (
    DEFAULT_CSG_CRDS_BASE_RATE,
    ContributionRule,
    InMemoryParametersSource,
    ParametersSource,
    PayrollParameters,
    resolve_parameters,
)
from payroll_kernel.domain.values import (
    Bracket,
    ContractSnapshot,
    ContributionCategory,
    ContributionScheme,
    EmployeeSnapshot,
    MonthlyInputs,
)
