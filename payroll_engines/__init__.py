"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel.domain, payroll_kernel.exceptions,
    payroll_kernel.logging_config and sibling engine modules.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      The pay period is always passed in explicitly.
    - Decimal-only arithmetic: floats are converted at the boundary.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from payroll_engines.brackets import calculate_social_security_base
    from payroll_engines.contributions import calculate_contribution_amount
    from payroll_engines.payslip import PayslipCalculator, calculate_payslip
    from payroll_engines.formatting import format_decimal
"""

from payroll_kernel.logging_config import get_logger

logger = get_logger("engines")

from payroll_engines.brackets import (
    BracketBases,
    calculate_bracket_bases,
    calculate_csg_crds_base,
    calculate_social_security_base,
)
from payroll_engines.contributions import (
    ContributionLine,
    build_contribution_line,
    build_contribution_lines,
    calculate_contribution_amount,
    rules_for_scheme,
)
from payroll_engines.formatting import (
    PayslipDisplayRow,
    format_decimal,
    format_payslip_lines,
    format_payslip_summary,
    format_rate,
)
from payroll_engines.gross import (
    GrossSalaryBreakdown,
    calculate_gross_salary,
    calculate_hourly_rate,
    calculate_pro_rata_salary,
)
from payroll_engines.payslip import (
    PayslipCalculationResult,
    PayslipCalculator,
    calculate_payslip,
)
from payroll_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Brackets
    "BracketBases",
    "calculate_bracket_bases",
    "calculate_csg_crds_base",
    "calculate_social_security_base",
    # Contributions
    "ContributionLine",
    "build_contribution_line",
    "build_contribution_lines",
    "calculate_contribution_amount",
    "rules_for_scheme",
    # Gross
    "GrossSalaryBreakdown",
    "calculate_gross_salary",
    "calculate_hourly_rate",
    "calculate_pro_rata_salary",
    # Payslip
    "PayslipCalculationResult",
    "PayslipCalculator",
    "calculate_payslip",
    # Formatting
    "PayslipDisplayRow",
    "format_decimal",
    "format_payslip_lines",
    "format_payslip_summary",
    "format_rate",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
