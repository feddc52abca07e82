"""
estate_config -- versioned statutory configuration for estate settlement.

Responsibility:
    Supplies the ``SettlementPolicy`` injected into each estate aggregate.
    Nothing in the engine reads statutory constants from module globals;
    tier defaults, limitation periods, the unfreeze threshold and the
    inflation method all arrive through the policy.

Architecture position:
    Configuration -- sits above estate_kernel and estate_engines and below
    estate_modules / estate_services.
"""

from estate_config.loader import (
    DEFAULT_POLICY,
    compute_checksum,
    load_named_policy,
    load_policy,
)
from estate_config.schema import (
    InflationSettings,
    LimitationPeriods,
    SettlementPolicy,
)

__all__ = [
    "DEFAULT_POLICY",
    "InflationSettings",
    "LimitationPeriods",
    "SettlementPolicy",
    "compute_checksum",
    "load_named_policy",
    "load_policy",
]
