"""
Payslip Engine - Gross-to-net payslip calculation for one employee and period.

Responsibility:
    Orchestrates the payslip: resolves the gross salary and working hours
    from the employee and contract snapshots, resolves the payroll
    parameters in force, computes every contribution line of the
    employee's scheme, then tax, net salary and employer cost.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Parameters are obtained
    through an injected ParametersSource; storage-backed sources perform
    their I/O before returning plain PayrollParameters.

Invariants enforced:
    - net_salary = gross - total employee contributions - tax.
    - employer_cost = gross + total employer contributions.
    - tax_amount = gross x tax_rate / 100.
    - Lines follow the configured order of the scheme's rules.
    - No intermediate rounding; results are exact Decimals.
    - Identical inputs and parameters give equal results.

Failure modes:
    - InvalidEmployeeDataError: no gross salary resolvable, a malformed
      salary, hours, tax rate or monthly input, or an employee_id that does
      not match the employee snapshot.
    - ParametersNotFoundError: no parameters cover the period.
    Both are terminal; no partial result is returned.

Usage:
    from datetime import date
    from payroll_config import get_parameters_source
    from payroll_engines.payslip import PayslipCalculator
    from payroll_kernel.domain.values import EmployeeSnapshot

    calculator = PayslipCalculator(get_parameters_source())
    result = calculator.calculate(
        employee_id="emp-1",
        period=date(2023, 6, 1),
        employee=EmployeeSnapshot("emp-1", gross_monthly_salary="3000"),
    )
    print(result.net_salary)
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from payroll_engines.brackets import calculate_bracket_bases
from payroll_engines.contributions import (
    ContributionLine,
    build_contribution_lines,
    rules_for_scheme,
)
from payroll_engines.gross import (
    GrossSalaryBreakdown,
    calculate_gross_salary,
    calculate_pro_rata_salary,
)
from payroll_engines.tracer import traced_engine
from payroll_kernel.domain.decimals import (
    HUNDRED,
    ZERO,
    DecimalLike,
    percent_of,
    round_decimal,
    to_non_negative_decimal,
)
from payroll_kernel.domain.parameters import (
    InMemoryParametersSource,
    ParametersSource,
    PayrollParameters,
)
from payroll_kernel.domain.values import (
    DEFAULT_MONTHLY_HOURS,
    FULL_TIME_WEEKLY_HOURS,
    ContractSnapshot,
    ContributionCategory,
    ContributionScheme,
    EmployeeSnapshot,
    MonthlyInputs,
)
from payroll_kernel.exceptions import InvalidEmployeeDataError, ValidationError
from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.payslip")


@dataclass(frozen=True)
class PayslipCalculationResult:
    """
    Complete payslip calculation.

    Immutable value object owned by the caller, who persists or renders it.
    """

    employee_id: str
    period: date
    scheme: ContributionScheme
    gross_salary: Decimal
    net_salary: Decimal
    employer_cost: Decimal
    total_employee_contributions: Decimal
    total_employer_contributions: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    lines: tuple[ContributionLine, ...]

    # Calculation context
    working_hours: Decimal
    social_security_ceiling: Decimal
    csg_crds_base: Decimal
    taxable_income: Decimal
    net_before_tax: Decimal
    gross_breakdown: GrossSalaryBreakdown
    parameters_effective_date: date

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def lines_by_category(self, category: ContributionCategory) -> tuple[ContributionLine, ...]:
        """Lines of one category, in payslip order."""
        return tuple(line for line in self.lines if line.category == category)

    def line(self, code: str) -> ContributionLine | None:
        """The line with the given rule code, if present."""
        for line in self.lines:
            if line.code == code:
                return line
        return None

    def to_dict(self, decimals: int | None = None) -> dict[str, Any]:
        """
        Serialize for transport or storage.

        Every Decimal is emitted as a decimal string, never a float.  When
        ``decimals`` is given, monetary amounts are rounded half-up to that
        many places; rates and hours are always emitted as-is.
        """

        def money(value: Decimal) -> str:
            if decimals is None:
                return str(value)
            return str(round_decimal(value, decimals))

        breakdown = self.gross_breakdown
        return {
            "employee_id": self.employee_id,
            "period": self.period.isoformat(),
            "scheme": self.scheme.value,
            "gross_salary": money(self.gross_salary),
            "net_salary": money(self.net_salary),
            "employer_cost": money(self.employer_cost),
            "total_employee_contributions": money(self.total_employee_contributions),
            "total_employer_contributions": money(self.total_employer_contributions),
            "tax_rate": str(self.tax_rate),
            "tax_amount": money(self.tax_amount),
            "taxable_income": money(self.taxable_income),
            "net_before_tax": money(self.net_before_tax),
            "working_hours": str(self.working_hours),
            "social_security_ceiling": money(self.social_security_ceiling),
            "csg_crds_base": money(self.csg_crds_base),
            "parameters_effective_date": self.parameters_effective_date.isoformat(),
            "gross_breakdown": {
                "base_salary": money(breakdown.base_salary),
                "overtime_25_hours": str(breakdown.overtime_25_hours),
                "overtime_25_amount": money(breakdown.overtime_25_amount),
                "overtime_50_hours": str(breakdown.overtime_50_hours),
                "overtime_50_amount": money(breakdown.overtime_50_amount),
                "bonuses": money(breakdown.bonuses),
            },
            "lines": [
                {
                    "code": line.code,
                    "category": line.category.value,
                    "label": line.label,
                    "base_type": line.base_type.value,
                    "base_amount": money(line.base_amount),
                    "employee_rate": str(line.employee_rate),
                    "employer_rate": str(line.employer_rate),
                    "employee_amount": money(line.employee_amount),
                    "employer_amount": money(line.employer_amount),
                    "deductible": line.deductible,
                }
                for line in self.lines
            ],
        }


class PayslipCalculator:
    """
    Calculate payslips.

    Pure orchestration - no I/O of its own, no state kept between calls.
    Parameters are provided by the injected source.

    Args:
        parameters_source: Returns the PayrollParameters for a period.
        prorate_part_time: When True, a gross salary expressed for full
            time is prorated by working hours below 35h/week.  Off by
            default: the contract salary is taken as already prorated.
    """

    def __init__(
        self,
        parameters_source: ParametersSource,
        prorate_part_time: bool = False,
    ):
        self._parameters_source = parameters_source
        self._prorate_part_time = prorate_part_time

    @property
    def parameters_source(self) -> ParametersSource:
        return self._parameters_source

    @traced_engine(
        "payslip",
        "1.0",
        fingerprint_fields=("employee_id", "period", "employee", "contract", "monthly_inputs"),
    )
    def calculate(
        self,
        employee_id: str,
        period: date,
        employee: EmployeeSnapshot,
        contract: ContractSnapshot | None = None,
        monthly_inputs: MonthlyInputs | None = None,
        run_id: str | None = None,
    ) -> PayslipCalculationResult:
        """
        Calculate the payslip of ``employee_id`` for ``period``.

        Args:
            employee_id: Employee identifier, reported on the result and
                on every error.
            period: Any date within the pay period.
            employee: Employee attributes.
            contract: Contract overriding salary and hours when it covers
                ``period``.
            monthly_inputs: Overtime hours and bonuses for the month.
            run_id: Payroll run identifier, added to every log line of
                the calculation.  Not part of the result.

        Returns:
            PayslipCalculationResult with every contribution line.

        Raises:
            InvalidEmployeeDataError: Gross salary missing, malformed input, or
                ``employee_id`` differs from ``employee.employee_id``.
            ParametersNotFoundError: No parameters cover ``period``.
        """
        with LogContext.bind(run_id=run_id, employee_id=employee_id, period=period):
            return self._calculate(employee_id, period, employee, contract, monthly_inputs)

    def _calculate(
        self,
        employee_id: str,
        period: date,
        employee: EmployeeSnapshot,
        contract: ContractSnapshot | None,
        monthly_inputs: MonthlyInputs | None,
    ) -> PayslipCalculationResult:
        t0 = time.monotonic()
        active_contract = contract if contract is not None and contract.covers(period) else None
        logger.info("payslip_calculation_started", extra={
            "scheme": employee.scheme.value,
            "has_contract": contract is not None,
            "contract_active": active_contract is not None,
            "has_monthly_inputs": monthly_inputs is not None,
        })

        if employee.employee_id != employee_id:
            raise self._invalid(employee_id, period, "employee_id", "does not match snapshot")

        base_salary = self._resolve_base_salary(employee_id, period, employee, active_contract)
        working_hours = self._resolve_working_hours(employee_id, period, employee, active_contract)
        tax_rate = self._normalize(employee_id, period, employee.tax_rate, "tax_rate")
        if tax_rate > HUNDRED:
            raise self._invalid(employee_id, period, "tax_rate", "must not exceed 100")

        monthly_hours = DEFAULT_MONTHLY_HOURS
        if self._prorate_part_time and working_hours < FULL_TIME_WEEKLY_HOURS:
            base_salary = calculate_pro_rata_salary(base_salary, working_hours)
            # Overtime is priced at the part-timer's own hourly rate
            monthly_hours = DEFAULT_MONTHLY_HOURS * working_hours / FULL_TIME_WEEKLY_HOURS
            logger.debug("payslip_salary_prorated", extra={
                "working_hours": str(working_hours),
                "prorated_salary": str(base_salary),
                "monthly_hours": str(monthly_hours),
            })

        try:
            breakdown = calculate_gross_salary(base_salary, monthly_inputs, monthly_hours)
        except ValidationError as e:
            raise self._invalid(employee_id, period, e.field, e.reason) from e
        gross = breakdown.total

        # ParametersNotFoundError propagates unchanged
        parameters = self._parameters_source.find_effective(period)

        scheme = employee.scheme
        bases = calculate_bracket_bases(
            gross,
            parameters.social_security_ceiling,
            parameters.csg_crds_base_rate,
        )
        lines = build_contribution_lines(
            rules_for_scheme(parameters.contribution_rules, scheme),
            bases,
        )

        total_employee = sum((line.employee_amount for line in lines), ZERO)
        total_employer = sum((line.employer_amount for line in lines), ZERO)
        non_deductible = sum(
            (line.employee_amount for line in lines if not line.deductible), ZERO
        )

        tax_amount = percent_of(gross, tax_rate)
        net_before_tax = gross - total_employee

        result = PayslipCalculationResult(
            employee_id=employee_id,
            period=period,
            scheme=scheme,
            gross_salary=gross,
            net_salary=net_before_tax - tax_amount,
            employer_cost=gross + total_employer,
            total_employee_contributions=total_employee,
            total_employer_contributions=total_employer,
            tax_rate=tax_rate,
            tax_amount=tax_amount,
            lines=lines,
            working_hours=working_hours,
            social_security_ceiling=parameters.social_security_ceiling,
            csg_crds_base=bases.csg_crds,
            taxable_income=gross - (total_employee - non_deductible),
            net_before_tax=net_before_tax,
            gross_breakdown=breakdown,
            parameters_effective_date=parameters.effective_date,
        )

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("payslip_calculation_completed", extra={
            "gross_salary": str(result.gross_salary),
            "total_employee_contributions": str(result.total_employee_contributions),
            "total_employer_contributions": str(result.total_employer_contributions),
            "tax_amount": str(result.tax_amount),
            "net_salary": str(result.net_salary),
            "employer_cost": str(result.employer_cost),
            "line_count": result.line_count,
            "parameters_effective_date": parameters.effective_date.isoformat(),
            "duration_ms": duration_ms,
        })
        return result

    def _resolve_base_salary(
        self,
        employee_id: str,
        period: date,
        employee: EmployeeSnapshot,
        contract: ContractSnapshot | None,
    ) -> Decimal:
        if contract is not None and contract.monthly_gross_salary is not None:
            return self._normalize(
                employee_id, period, contract.monthly_gross_salary, "monthly_gross_salary"
            )
        if employee.gross_monthly_salary is None:
            raise self._invalid(employee_id, period, "gross_monthly_salary", "is missing")
        return self._normalize(
            employee_id, period, employee.gross_monthly_salary, "gross_monthly_salary"
        )

    def _resolve_working_hours(
        self,
        employee_id: str,
        period: date,
        employee: EmployeeSnapshot,
        contract: ContractSnapshot | None,
    ) -> Decimal:
        # Only an explicitly part-time contract overrides the employee's hours
        if contract is not None and contract.part_time and contract.part_time_hours is not None:
            return self._normalize(employee_id, period, contract.part_time_hours, "part_time_hours")
        return self._normalize(employee_id, period, employee.working_hours, "working_hours")

    def _normalize(
        self,
        employee_id: str,
        period: date,
        value: DecimalLike,
        field: str,
    ) -> Decimal:
        try:
            return to_non_negative_decimal(value, field)
        except ValidationError as e:
            raise self._invalid(employee_id, period, field, e.reason) from e

    def _invalid(
        self,
        employee_id: str,
        period: date,
        field: str,
        reason: str,
    ) -> InvalidEmployeeDataError:
        logger.error("payslip_invalid_employee_data", extra={
            "field": field,
            "reason": reason,
        })
        return InvalidEmployeeDataError(employee_id, field, reason, period)


def calculate_payslip(
    employee_id: str,
    period: date,
    employee: EmployeeSnapshot,
    parameters: ParametersSource | Iterable[PayrollParameters],
    contract: ContractSnapshot | None = None,
    monthly_inputs: MonthlyInputs | None = None,
    prorate_part_time: bool = False,
    run_id: str | None = None,
) -> PayslipCalculationResult:
    """
    Calculate one payslip.

    Convenience function wrapping PayslipCalculator.  ``parameters`` is
    either a ParametersSource or an explicit collection of parameter
    records, resolved in memory.
    """
    if isinstance(parameters, ParametersSource):
        source = parameters
    else:
        source = InMemoryParametersSource(parameters)
    calculator = PayslipCalculator(source, prorate_part_time=prorate_part_time)
    return calculator.calculate(
        employee_id=employee_id,
        period=period,
        employee=employee,
        contract=contract,
        monthly_inputs=monthly_inputs,
        run_id=run_id,
    )
