"""
Estate Modules.

One sub-package per settlement ledger, plus the estate aggregate that
owns them.  Each ledger package contains:
- Domain models (frozen dataclasses and status enums)
- Workflows (declarative state machines)
- Ledger (the operations, raising typed kernel errors)

Modules:
- Assets: declared property, verification, co-ownership, encumbrances
- Debts: statutory tiers, payments, disputes, write-offs, limitation
- Liquidation: conversion of assets into cash for the waterfall
- Tax: assessment, payments, clearance certificate
- Gifts: lifetime gifts brought into hotchpot
- Claims: dependants' claims for reasonable provision
- Estate: the aggregate, lifecycle and distribution readiness
"""

from estate_modules import (
    assets,
    debts,
    liquidation,
    tax,
    gifts,
    claims,
    estate,
)

__all__ = [
    "assets",
    "debts",
    "liquidation",
    "tax",
    "gifts",
    "claims",
    "estate",
]
