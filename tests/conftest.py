"""
Pytest fixtures for the payroll engine test suite.

Provides:
- Structured logging configuration and log capture
- Reference payroll parameters (ceiling 3500 and the bundled 2023 table)
- Employee / contract snapshot builders
- In-memory SQLite sessions for the parameter store
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest
from hypothesis import HealthCheck, settings
from sqlalchemy.orm import Session

from payroll_config import get_parameters_source
from payroll_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from payroll_kernel.domain.parameters import (
    ContributionRule,
    InMemoryParametersSource,
    PayrollParameters,
)
from payroll_kernel.domain.values import (
    Bracket,
    ContributionCategory,
    ContributionScheme,
    EmployeeSnapshot,
)
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

SQLITE_URL = "sqlite://"

# _clear_log_context is autouse and function-scoped
settings.register_profile(
    "payroll",
    suppress_health_check=[HealthCheck.function_scoped_fixture, HealthCheck.too_slow],
)
settings.load_profile("payroll")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture payroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            calculator.calculate(...)
            logs = captured_logs()
            assert any(r["message"] == "payslip_calculation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("payroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Parameter fixtures
# =============================================================================


def make_rule(
    code: str,
    bracket: Bracket,
    employee_rate: str = "0",
    employer_rate: str = "0",
    category: ContributionCategory = ContributionCategory.AUTRES,
    **kwargs,
) -> ContributionRule:
    """Build a ContributionRule with sensible defaults for tests."""
    return ContributionRule(
        code=code,
        label=kwargs.pop("label", code.title()),
        category=category,
        bracket=bracket,
        employee_rate=Decimal(employee_rate),
        employer_rate=Decimal(employer_rate),
        **kwargs,
    )


def make_parameters(
    effective_date: date = date(2023, 1, 1),
    ceiling: str = "3500",
    end_date: date | None = None,
    is_active: bool = True,
    rules: tuple[ContributionRule, ...] | None = None,
    label: str | None = None,
) -> PayrollParameters:
    """Build a PayrollParameters record with a small, round-number rate table."""
    if rules is None:
        rules = simple_rules()
    return PayrollParameters(
        effective_date=effective_date,
        end_date=end_date,
        is_active=is_active,
        social_security_ceiling=Decimal(ceiling),
        contribution_rules=rules,
        label=label,
    )


def simple_rules() -> tuple[ContributionRule, ...]:
    """One rule per bracket, with round rates, plus an executive-only line."""
    return (
        make_rule(
            "CSG", Bracket.CSG_CRDS, employee_rate="10",
            category=ContributionCategory.CSG_CRDS, deductible=False,
        ),
        make_rule(
            "HEALTH", Bracket.TOTAL, employee_rate="1", employer_rate="7",
            category=ContributionCategory.SECURITE_SOCIALE,
        ),
        make_rule(
            "PENSION_T1", Bracket.TRANCHE_1, employee_rate="5", employer_rate="8",
            category=ContributionCategory.RETRAITE,
        ),
        make_rule(
            "PENSION_T2", Bracket.TRANCHE_2, employee_rate="10", employer_rate="15",
            category=ContributionCategory.COMPLEMENTAIRE, skip_when_base_is_zero=True,
        ),
        make_rule(
            "EXEC_ONLY", Bracket.TRANCHE_1, employee_rate="1", employer_rate="2",
            schemes=frozenset({ContributionScheme.EXECUTIVE}),
        ),
    )


@pytest.fixture
def parameters_2023() -> PayrollParameters:
    return make_parameters(label="test-2023")


@pytest.fixture
def simple_source(parameters_2023) -> InMemoryParametersSource:
    return InMemoryParametersSource([parameters_2023])


@pytest.fixture(scope="session")
def bundled_source() -> InMemoryParametersSource:
    """The parameter sets shipped in payroll_config/sets."""
    return get_parameters_source()


@pytest.fixture
def employee() -> EmployeeSnapshot:
    return EmployeeSnapshot(employee_id="emp-001", gross_monthly_salary=Decimal("3000"))


@pytest.fixture
def rule_factory():
    """Factory fixture: build ContributionRule objects."""
    return make_rule


@pytest.fixture
def parameters_factory():
    """Factory fixture: build PayrollParameters records."""
    return make_parameters


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session() -> Session:
    """Fresh in-memory SQLite database with the payroll tables."""
    init_engine_from_url(SQLITE_URL)
    create_tables()
    db_session = get_session()
    yield db_session
    db_session.close()
    drop_tables()
    reset_engine()
