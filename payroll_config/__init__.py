"""
payroll_config -- public entrypoint for payroll parameter configuration.

Responsibility:
    Provides ``get_parameters_source()``, the runtime way to obtain the
    time-versioned payroll parameters shipped as YAML parameter sets, and
    ``store_parameter_sets()``, which seeds the database parameter table
    from them.

Architecture position:
    Configuration -- sits above ``payroll_kernel``.  The kernel MUST NEVER
    import from ``payroll_config``.

Failure modes:
    - ``FileNotFoundError`` -- the configuration directory does not exist.
    - ``ValueError`` / ``KeyError`` -- malformed parameter set files.

Audit relevance:
    Every ``get_parameters_source()`` call emits a ``PAYROLL_CONFIG_TRACE``
    log entry with the directory, the number of sets and the checksum of
    each file, tying every payslip back to the parameter files in force.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from payroll_config.loader import (
    PARAMETER_SET_GLOB,
    compute_checksum,
    load_parameter_sets,
    load_yaml_file,
)
from payroll_kernel.db.engine import session_scope
from payroll_kernel.domain.parameters import InMemoryParametersSource, PayrollParameters
from payroll_kernel.models import PayrollParametersRecord

_logger = logging.getLogger("payroll_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def get_parameters_source(config_dir: Path | None = None) -> InMemoryParametersSource:
    """
    Build a parameters source over the YAML parameter sets.

    Args:
        config_dir: Override path to the parameter sets directory.
            Defaults to payroll_config/sets/.

    Returns:
        InMemoryParametersSource over every set in the directory.

    Raises:
        FileNotFoundError: If the directory does not exist.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    records = load_parameter_sets(sets_dir)

    _logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_dir": str(sets_dir),
            "set_count": len(records),
            "checksums": {
                path.name: compute_checksum(load_yaml_file(path))
                for path in sorted(sets_dir.glob(PARAMETER_SET_GLOB))
            },
        },
    )
    return InMemoryParametersSource(records)


def store_parameter_sets(
    parameter_sets: Iterable[PayrollParameters] | None = None,
    config_dir: Path | None = None,
) -> int:
    """
    Persist parameter sets to the payroll_parameters table.

    All sets are written in one transaction: either every set is stored
    or, on any error, none is.  The database engine must already be
    initialized and its tables created.

    Args:
        parameter_sets: Sets to store.  Defaults to the YAML sets in
            ``config_dir``.
        config_dir: Parameter sets directory used when ``parameter_sets``
            is None.  Defaults to payroll_config/sets/.

    Returns:
        Number of sets stored.
    """
    if parameter_sets is None:
        parameter_sets = load_parameter_sets(config_dir or _DEFAULT_CONFIG_DIR)

    stored = 0
    with session_scope() as session:
        for params in parameter_sets:
            session.add(PayrollParametersRecord.from_domain(params))
            stored += 1

    _logger.info("parameter_sets_stored", extra={"set_count": stored})
    return stored


__all__ = [
    "get_parameters_source",
    "store_parameter_sets",
]
