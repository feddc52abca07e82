"""
Configuration Loader (``estate_config.loader``).

Responsibility
--------------
Loads a settlement policy YAML file and parses it into a frozen
``SettlementPolicy``.  The checksum of the raw document is attached to the
policy so auditors can tie any computation back to an exact file.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values  -> ``ValueError`` from schema ``__post_init__``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from estate_config.schema import InflationSettings, LimitationPeriods, SettlementPolicy
from estate_kernel.logging_config import get_logger

logger = get_logger("config.loader")

SETS_DIR = Path(__file__).parent / "sets"
DEFAULT_POLICY = "kenya_s45"


def load_yaml_file(path: Path) -> dict[str, Any]:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_decimal(value: Any) -> Decimal:
    if isinstance(value, float):
        # YAML floats lose precision; go through their repr
        return Decimal(repr(value))
    return Decimal(str(value))


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_inflation(data: dict[str, Any]) -> InflationSettings:
    rate = data.get("annual_rate")
    index = data.get("price_index") or {}
    return InflationSettings(
        method=data.get("method", "none"),
        version=str(data.get("version", data.get("method", "none"))),
        annual_rate=parse_decimal(rate) if rate is not None else None,
        price_index={int(year): parse_decimal(level) for year, level in index.items()},
    )


def parse_policy(data: dict[str, Any]) -> SettlementPolicy:
    """Build a SettlementPolicy from a parsed YAML document."""
    limitation = data.get("limitation") or {}
    return SettlementPolicy(
        name=data["name"],
        version=int(data["version"]),
        jurisdiction=data["jurisdiction"],
        effective_from=parse_date(data["effective_from"]),
        unfreeze_reason_min_length=int(data.get("unfreeze_reason_min_length", 15)),
        debt_type_tiers={
            str(k): str(v) for k, v in (data.get("debt_type_tiers") or {}).items()
        },
        limitation=LimitationPeriods(
            unsecured_years=int(limitation.get("unsecured_years", 6)),
            secured_years=int(limitation.get("secured_years", 12)),
        ),
        inflation=parse_inflation(data.get("inflation") or {}),
        checksum=compute_checksum(data),
    )


def load_policy(path: Path | str) -> SettlementPolicy:
    path = Path(path)
    policy = parse_policy(load_yaml_file(path))
    logger.info(
        "settlement_policy_loaded",
        extra={
            "policy": policy.name,
            "version": policy.version,
            "checksum": policy.checksum,
            "source": str(path),
        },
    )
    return policy


def load_named_policy(name: str = DEFAULT_POLICY) -> SettlementPolicy:
    """Load one of the policy sets shipped with the package."""
    return load_policy(SETS_DIR / f"{name}.yaml")
