"""
Typed Exception Hierarchy for the Payroll Kernel.

Every error raised by the kernel or the engines is a subclass of
PayrollKernelError and carries:

  1. A TYPED class (catch by type, not by message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (employee id, period, offending field)

Example:
    try:
        result = calculator.calculate(employee_id, period, employee)
    except ParametersNotFoundError as e:
        api_response(code=e.code, period=e.period)
    except InvalidEmployeeDataError as e:
        api_response(code=e.code, field=e.field)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- ValidationError
    |
    +-- EmployeeError
    |   +-- InvalidEmployeeDataError
    |
    +-- ParametersError
        +-- ParametersNotFoundError
        +-- InvalidParametersError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | VALIDATION_ERROR            | Negative or non-numeric monetary input,
                |                             | unknown bracket
----------------|-----------------------------|-----------------------------------------
Employee        | INVALID_EMPLOYEE_DATA       | No gross salary resolvable, malformed
                |                             | working hours or tax rate
----------------|-----------------------------|-----------------------------------------
Parameters      | PARAMETERS_NOT_FOUND        | No active parameters cover the period
                | INVALID_PARAMETERS          | Parameter record is inconsistent
                |                             | (end before start, bad ceiling)

None of these are retryable: the caller must fix the input data or the
administrative parameter table.
"""

from datetime import date
from typing import Any


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


class ValidationError(PayrollKernelError):
    """A monetary or bracket input was rejected before any calculation."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")


# Employee-related exceptions


class EmployeeError(PayrollKernelError):
    """Base exception for employee input errors."""

    code: str = "EMPLOYEE_ERROR"


class InvalidEmployeeDataError(EmployeeError):
    """Employee or contract attributes cannot support a calculation."""

    code: str = "INVALID_EMPLOYEE_DATA"

    def __init__(
        self,
        employee_id: str,
        field: str,
        reason: str,
        period: date | None = None,
    ):
        self.employee_id = employee_id
        self.field = field
        self.reason = reason
        self.period = period
        where = f" for period {period.isoformat()}" if period else ""
        super().__init__(
            f"Invalid data for employee {employee_id}{where}: {field} {reason}"
        )


# Parameter-related exceptions


class ParametersError(PayrollKernelError):
    """Base exception for payroll parameter errors."""

    code: str = "PARAMETERS_ERROR"


class ParametersNotFoundError(ParametersError):
    """No active payroll parameters cover the requested period."""

    code: str = "PARAMETERS_NOT_FOUND"

    def __init__(self, period: date):
        self.period = period
        super().__init__(
            f"No active payroll parameters found for period: {period.isoformat()}"
        )


class InvalidParametersError(ParametersError):
    """A payroll parameter record is internally inconsistent."""

    code: str = "INVALID_PARAMETERS"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid payroll parameters: {field} {reason}")
