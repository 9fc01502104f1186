"""
Brackets Engine - Social security contribution bases.

Computes the base a contribution is assessed on from the gross salary and
the monthly social security ceiling (plafond):

    TOTAL      gross
    TRANCHE_1  min(gross, ceiling)
    TRANCHE_2  max(0, min(gross, 8 x ceiling) - ceiling)
    CSG_CRDS   gross x CSG/CRDS base rate (98.25% by default)

Pure functions with no I/O.  Results are exact Decimals, never rounded.

Usage:
    from decimal import Decimal
    from payroll_engines.brackets import calculate_social_security_base
    from payroll_kernel.domain.values import Bracket

    calculate_social_security_base(Decimal("4000"), Decimal("3500"), Bracket.TRANCHE_2)
    # Decimal('500')
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_kernel.domain.decimals import ZERO, DecimalLike, to_non_negative_decimal
from payroll_kernel.domain.parameters import DEFAULT_CSG_CRDS_BASE_RATE
from payroll_kernel.domain.values import Bracket
from payroll_kernel.exceptions import ValidationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.brackets")

# Tranche 2 stops at 8 ceilings
TRANCHE_2_CEILING_MULTIPLIER = Decimal("8")


def _to_bracket(bracket: Bracket | str) -> Bracket:
    try:
        return Bracket(bracket)
    except ValueError as e:
        logger.error("unknown_bracket", extra={"bracket": str(bracket)})
        raise ValidationError("bracket", bracket, "unknown bracket") from e


def calculate_csg_crds_base(
    gross_salary: DecimalLike,
    csg_crds_base_rate: DecimalLike = DEFAULT_CSG_CRDS_BASE_RATE,
) -> Decimal:
    """CSG/CRDS base: gross x base rate, independent of the ceiling."""
    gross = to_non_negative_decimal(gross_salary, "gross_salary")
    rate = to_non_negative_decimal(csg_crds_base_rate, "csg_crds_base_rate")
    return gross * rate


def calculate_social_security_base(
    gross_salary: DecimalLike,
    ceiling: DecimalLike,
    bracket: Bracket | str,
    csg_crds_base_rate: DecimalLike = DEFAULT_CSG_CRDS_BASE_RATE,
) -> Decimal:
    """
    Compute the contribution base for one bracket.

    Preconditions:
        - gross_salary and ceiling are non-negative.
        - bracket is a Bracket member or its string value.

    Postconditions:
        - Returns an unrounded Decimal >= 0.
        - A zero gross salary gives a zero base for every bracket.

    Raises:
        ValidationError: Negative or non-numeric amount, unknown bracket.
    """
    gross = to_non_negative_decimal(gross_salary, "gross_salary")
    cap = to_non_negative_decimal(ceiling, "ceiling")
    kind = _to_bracket(bracket)

    if kind is Bracket.TOTAL:
        return gross
    if kind is Bracket.TRANCHE_1:
        return min(gross, cap)
    if kind is Bracket.TRANCHE_2:
        return max(ZERO, min(gross, cap * TRANCHE_2_CEILING_MULTIPLIER) - cap)
    if kind is Bracket.CSG_CRDS:
        return calculate_csg_crds_base(gross, csg_crds_base_rate)

    # Unreachable while every Bracket member is handled above
    raise ValidationError("bracket", bracket, "no base rule for bracket")


@dataclass(frozen=True)
class BracketBases:
    """
    All four contribution bases for one gross salary.

    Immutable value object computed once per payslip.
    """

    total: Decimal
    tranche_1: Decimal
    tranche_2: Decimal
    csg_crds: Decimal

    def for_bracket(self, bracket: Bracket | str) -> Decimal:
        kind = _to_bracket(bracket)
        if kind is Bracket.TOTAL:
            return self.total
        if kind is Bracket.TRANCHE_1:
            return self.tranche_1
        if kind is Bracket.TRANCHE_2:
            return self.tranche_2
        return self.csg_crds


def calculate_bracket_bases(
    gross_salary: DecimalLike,
    ceiling: DecimalLike,
    csg_crds_base_rate: DecimalLike = DEFAULT_CSG_CRDS_BASE_RATE,
) -> BracketBases:
    """Compute every bracket base for ``gross_salary`` at once."""
    bases = BracketBases(
        total=calculate_social_security_base(
            gross_salary, ceiling, Bracket.TOTAL, csg_crds_base_rate
        ),
        tranche_1=calculate_social_security_base(
            gross_salary, ceiling, Bracket.TRANCHE_1, csg_crds_base_rate
        ),
        tranche_2=calculate_social_security_base(
            gross_salary, ceiling, Bracket.TRANCHE_2, csg_crds_base_rate
        ),
        csg_crds=calculate_social_security_base(
            gross_salary, ceiling, Bracket.CSG_CRDS, csg_crds_base_rate
        ),
    )
    logger.debug("bracket_bases_calculated", extra={
        "gross_salary": str(gross_salary),
        "ceiling": str(ceiling),
        "tranche_1": str(bases.tranche_1),
        "tranche_2": str(bases.tranche_2),
        "csg_crds": str(bases.csg_crds),
    })
    return bases
