"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads payroll parameter set YAML files and parses them into the kernel's
``PayrollParameters`` / ``ContributionRule`` dataclasses.  Runtime callers
go through ``payroll_config.get_parameters_source()``.

Architecture position
---------------------
**Config layer** -- sits above ``payroll_kernel``.  The kernel never
imports from ``payroll_config``.

Invariants enforced
-------------------
* Required keys are never defaulted: a missing key raises ``KeyError``.
* Amounts and rates are read through ``str`` into ``Decimal``; quoting
  them in YAML keeps them out of float entirely.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid date format  -> ``ValueError`` from ``date.fromisoformat``.
* Inconsistent values  -> ``InvalidParametersError`` from the kernel.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from payroll_kernel.domain.parameters import (
    ALL_SCHEMES,
    DEFAULT_CSG_CRDS_BASE_RATE,
    ContributionRule,
    PayrollParameters,
)
from payroll_kernel.domain.values import ContributionScheme
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.loader")

PARAMETER_SET_GLOB = "*.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """
    Parse a date from YAML (string or date object).

    Raises:
        ValueError: if ``value`` is not a valid date representation.
    """
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_optional_date(value: Any) -> date | None:
    if value is None:
        return None
    return parse_date(value)


def parse_schemes(value: Any) -> frozenset[ContributionScheme]:
    """Parse a rule's ``schemes`` list; absent means every scheme."""
    if value is None:
        return ALL_SCHEMES
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ValueError(f"Cannot parse schemes from {value!r}")
    return frozenset(ContributionScheme(str(s).lower()) for s in value)


def parse_contribution_rule(data: dict[str, Any]) -> ContributionRule:
    """Parse a ContributionRule from a dict."""
    return ContributionRule(
        code=data["code"],
        label=data["label"],
        category=data["category"],
        bracket=data["bracket"],
        employee_rate=str(data.get("employee_rate", "0")),
        employer_rate=str(data.get("employer_rate", "0")),
        schemes=parse_schemes(data.get("schemes")),
        deductible=bool(data.get("deductible", True)),
        skip_when_base_is_zero=bool(data.get("skip_when_base_is_zero", False)),
    )


def parse_parameter_set(data: dict[str, Any]) -> PayrollParameters:
    """Parse one PayrollParameters version from a dict."""
    return PayrollParameters(
        effective_date=parse_date(data["effective_date"]),
        end_date=parse_optional_date(data.get("end_date")),
        is_active=bool(data.get("is_active", True)),
        social_security_ceiling=str(data["social_security_ceiling"]),
        csg_crds_base_rate=str(data.get("csg_crds_base_rate", DEFAULT_CSG_CRDS_BASE_RATE)),
        contribution_rules=tuple(
            parse_contribution_rule(rule) for rule in data.get("contributions", [])
        ),
        label=data.get("label") or data.get("set_id"),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def load_parameter_set(path: Path) -> PayrollParameters:
    """Load and parse a single parameter set file."""
    data = load_yaml_file(path)
    params = parse_parameter_set(data)
    logger.debug("parameter_set_loaded", extra={
        "path": str(path),
        "set_id": data.get("set_id"),
        "effective_date": params.effective_date.isoformat(),
        "rule_count": len(params.contribution_rules),
        "checksum": compute_checksum(data),
    })
    return params


def load_parameter_sets(directory: Path) -> list[PayrollParameters]:
    """
    Load every ``*.yaml`` parameter set in ``directory``.

    Returns:
        Parameter versions ordered by effective_date.

    Raises:
        FileNotFoundError: If ``directory`` does not exist.
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"Parameter sets directory not found: {directory}")
    sets = [load_parameter_set(path) for path in sorted(directory.glob(PARAMETER_SET_GLOB))]
    return sorted(sets, key=lambda p: p.effective_date)
