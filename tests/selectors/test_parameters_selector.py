"""
Tests for the database-backed parameters source.

Covers:
- Round trip of PayrollParameters through the ORM models
- find_effective: same semantics as the in-memory resolver
- list_all ordering and inactive filtering
"""

from datetime import date
from decimal import Decimal

import pytest

from payroll_engines.payslip import PayslipCalculator
from payroll_kernel.domain.parameters import ParametersSource, resolve_parameters
from payroll_kernel.domain.values import ContributionScheme, EmployeeSnapshot
from payroll_kernel.exceptions import ParametersNotFoundError
from payroll_kernel.models import ContributionRateRecord, PayrollParametersRecord
from payroll_kernel.selectors import PayrollParametersSelector


@pytest.fixture
def stored(session, parameters_factory):
    """Three versions: closed 2022, open-ended 2023, inactive July 2023."""
    records = [
        parameters_factory(
            effective_date=date(2022, 1, 1),
            end_date=date(2022, 12, 31),
            ceiling="3428",
            label="2022",
        ),
        parameters_factory(effective_date=date(2023, 1, 1), ceiling="3666", label="2023"),
        parameters_factory(
            effective_date=date(2023, 7, 1), ceiling="9999", is_active=False, label="draft"
        ),
    ]
    for params in records:
        session.add(PayrollParametersRecord.from_domain(params))
    session.commit()
    return records


class TestPayrollParametersRecord:

    def test_round_trip(self, session, parameters_2023):
        session.add(PayrollParametersRecord.from_domain(parameters_2023))
        session.commit()
        session.expunge_all()

        record = session.query(PayrollParametersRecord).one()
        assert record.to_domain() == parameters_2023

    def test_rate_lines_keep_position(self, session, parameters_2023):
        session.add(PayrollParametersRecord.from_domain(parameters_2023))
        session.commit()

        rates = session.query(ContributionRateRecord).order_by(ContributionRateRecord.position).all()
        assert [r.code for r in rates] == [r.code for r in parameters_2023.contribution_rules]
        exec_only = next(r for r in rates if r.code == "EXEC_ONLY")
        assert exec_only.schemes == ContributionScheme.EXECUTIVE.value

    def test_decimals_survive_storage(self, session, bundled_source):
        params = bundled_source.find_effective(date(2023, 6, 1))
        session.add(PayrollParametersRecord.from_domain(params))
        session.commit()
        session.expunge_all()

        loaded = PayrollParametersSelector(session).find_effective(date(2023, 6, 1))
        apec = next(r for r in loaded.contribution_rules if r.code == "APEC")
        assert apec.employee_rate == Decimal("0.024")
        assert loaded.csg_crds_base_rate == Decimal("0.9825")
        assert loaded == params


class TestPayrollParametersSelector:

    def test_satisfies_protocol(self, session):
        assert isinstance(PayrollParametersSelector(session), ParametersSource)

    def test_find_effective(self, session, stored):
        selector = PayrollParametersSelector(session)
        assert selector.find_effective(date(2022, 6, 1)).label == "2022"
        assert selector.find_effective(date(2022, 12, 31)).label == "2022"
        assert selector.find_effective(date(2023, 1, 1)).label == "2023"

    def test_inactive_version_ignored(self, session, stored):
        params = PayrollParametersSelector(session).find_effective(date(2023, 8, 1))
        assert params.label == "2023"
        assert params.social_security_ceiling == Decimal("3666")

    def test_not_found(self, session, stored):
        with pytest.raises(ParametersNotFoundError) as exc_info:
            PayrollParametersSelector(session).find_effective(date(2021, 12, 31))
        assert exc_info.value.period == date(2021, 12, 31)

    @pytest.mark.parametrize(
        "period",
        [date(2022, 1, 1), date(2022, 7, 14), date(2023, 1, 1), date(2023, 7, 1), date(2031, 1, 1)],
    )
    def test_agrees_with_in_memory_resolver(self, session, stored, period):
        assert PayrollParametersSelector(session).find_effective(period) == resolve_parameters(period, stored)

    def test_list_all(self, session, stored):
        selector = PayrollParametersSelector(session)
        assert [p.label for p in selector.list_all()] == ["2022", "2023"]
        assert [p.label for p in selector.list_all(include_inactive=True)] == ["2022", "2023", "draft"]

    def test_selector_is_read_only(self, session, stored):
        PayrollParametersSelector(session).find_effective(date(2023, 1, 1))
        assert not session.new
        assert not session.dirty

    def test_drives_payslip_calculation(self, session, stored):
        calculator = PayslipCalculator(PayrollParametersSelector(session))
        employee = EmployeeSnapshot("emp-001", Decimal("4000"))
        result = calculator.calculate("emp-001", date(2023, 3, 1), employee)
        assert result.social_security_ceiling == Decimal("3666")
        assert result.line("PENSION_T2").base_amount == Decimal("334")
