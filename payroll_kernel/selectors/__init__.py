"""Selectors for the payroll kernel (read side)."""

from payroll_kernel.selectors.parameters_selector import PayrollParametersSelector

__all__ = [
    "PayrollParametersSelector",
]
