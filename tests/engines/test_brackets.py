"""
Tests for the social security bracket bases.

Covers:
- TOTAL / TRANCHE_1 / TRANCHE_2 / CSG_CRDS rules
- Tranche 2 capped at 8 ceilings
- Zero and negative inputs, unknown brackets
- Property tests over random salaries and ceilings
"""

from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from payroll_engines.brackets import (
    BracketBases,
    calculate_bracket_bases,
    calculate_csg_crds_base,
    calculate_social_security_base,
)
from payroll_kernel.domain.values import Bracket
from payroll_kernel.exceptions import ValidationError

CEILING = Decimal("3500")

salaries = st.decimals(
    min_value=Decimal("0"), max_value=Decimal("10000000"),
    places=2, allow_nan=False, allow_infinity=False,
)
ceilings = st.decimals(
    min_value=Decimal("0.01"), max_value=Decimal("100000"),
    places=2, allow_nan=False, allow_infinity=False,
)


class TestSocialSecurityBase:
    """Per-bracket rules."""

    def test_total_is_gross(self):
        assert calculate_social_security_base(Decimal("3000"), CEILING, Bracket.TOTAL) == Decimal("3000")

    def test_tranche_1_below_ceiling(self):
        assert calculate_social_security_base(Decimal("3000"), CEILING, Bracket.TRANCHE_1) == Decimal("3000")

    def test_tranche_1_capped_at_ceiling(self):
        assert calculate_social_security_base(Decimal("4000"), CEILING, Bracket.TRANCHE_1) == Decimal("3500")

    def test_tranche_2_zero_below_ceiling(self):
        assert calculate_social_security_base(Decimal("3000"), CEILING, Bracket.TRANCHE_2) == Decimal("0")

    def test_tranche_2_above_ceiling(self):
        assert calculate_social_security_base(Decimal("4000"), CEILING, Bracket.TRANCHE_2) == Decimal("500")

    def test_tranche_2_capped_at_eight_ceilings(self):
        result = calculate_social_security_base(Decimal("40000"), CEILING, Bracket.TRANCHE_2)
        assert result == Decimal("24500")  # 28000 - 3500

    def test_tranche_2_exactly_eight_ceilings(self):
        result = calculate_social_security_base(Decimal("28000"), CEILING, Bracket.TRANCHE_2)
        assert result == Decimal("24500")

    def test_csg_crds(self):
        result = calculate_social_security_base(Decimal("3000"), CEILING, Bracket.CSG_CRDS)
        assert result == Decimal("2947.5")

    def test_csg_crds_ignores_ceiling(self):
        low = calculate_social_security_base(Decimal("10000"), Decimal("1"), Bracket.CSG_CRDS)
        high = calculate_social_security_base(Decimal("10000"), Decimal("99999"), Bracket.CSG_CRDS)
        assert low == high == Decimal("9825")

    def test_csg_crds_custom_rate(self):
        result = calculate_social_security_base(
            Decimal("1000"), CEILING, Bracket.CSG_CRDS, csg_crds_base_rate="0.98"
        )
        assert result == Decimal("980")

    def test_plain_numbers_accepted(self):
        assert calculate_social_security_base(4000, 3500, "TRANCHE_2") == Decimal("500")
        assert calculate_social_security_base(3000.0, "3500", Bracket.CSG_CRDS) == Decimal("2947.5")

    @pytest.mark.parametrize("bracket", list(Bracket))
    def test_zero_gross_gives_zero(self, bracket):
        assert calculate_social_security_base(Decimal("0"), CEILING, bracket) == Decimal("0")

    def test_negative_gross_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_social_security_base(Decimal("-1"), CEILING, Bracket.TOTAL)
        assert exc_info.value.field == "gross_salary"

    def test_negative_ceiling_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_social_security_base(Decimal("1000"), Decimal("-3500"), Bracket.TRANCHE_1)
        assert exc_info.value.field == "ceiling"

    def test_unknown_bracket_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_social_security_base(Decimal("1000"), CEILING, "TRANCHE_3")
        assert exc_info.value.field == "bracket"

    def test_result_not_rounded(self):
        result = calculate_social_security_base(Decimal("1000.01"), CEILING, Bracket.CSG_CRDS)
        assert result == Decimal("982.509825")


class TestBracketBases:

    def test_all_bases_at_once(self):
        bases = calculate_bracket_bases(Decimal("4000"), CEILING)
        assert bases == BracketBases(
            total=Decimal("4000"),
            tranche_1=Decimal("3500"),
            tranche_2=Decimal("500"),
            csg_crds=Decimal("3930"),
        )

    def test_for_bracket(self):
        bases = calculate_bracket_bases(Decimal("4000"), CEILING)
        assert bases.for_bracket(Bracket.TRANCHE_1) == Decimal("3500")
        assert bases.for_bracket("CSG_CRDS") == Decimal("3930")

    def test_csg_crds_helper(self):
        assert calculate_csg_crds_base(Decimal("3000")) == Decimal("2947.5")


class TestBracketProperties:
    """Invariants over arbitrary non-negative salaries and ceilings."""

    @given(gross=salaries, ceiling=ceilings)
    @settings(max_examples=200)
    def test_tranche_1_is_min_of_gross_and_ceiling(self, gross, ceiling):
        assert calculate_social_security_base(gross, ceiling, Bracket.TRANCHE_1) == min(gross, ceiling)

    @given(gross=salaries, ceiling=ceilings)
    @settings(max_examples=200)
    def test_tranches_bounded_by_eight_ceilings(self, gross, ceiling):
        t1 = calculate_social_security_base(gross, ceiling, Bracket.TRANCHE_1)
        t2 = calculate_social_security_base(gross, ceiling, Bracket.TRANCHE_2)
        assert t2 >= 0
        assert t1 + t2 <= min(gross, 8 * ceiling)
        # The two tranches partition the salary up to 8 ceilings
        assert t1 + t2 == min(gross, 8 * ceiling)

    @given(gross=salaries, ceiling=ceilings)
    def test_total_is_identity(self, gross, ceiling):
        assert calculate_social_security_base(gross, ceiling, Bracket.TOTAL) == gross

    @given(gross=salaries)
    def test_csg_crds_is_exact_product(self, gross):
        assert calculate_csg_crds_base(gross) == gross * Decimal("0.9825")
