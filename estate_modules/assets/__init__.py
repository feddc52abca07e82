"""
Asset Ledger (``estate_modules.assets``).

Declared estate assets with a type-specific details payload, the
verification workflow, co-ownership shares and encumbrances.
"""

from estate_modules.assets.models import (
    Asset,
    AssetType,
    BusinessDetails,
    CoOwner,
    Encumbrance,
    EncumbranceType,
    FinancialDetails,
    LandDetails,
    OtherDetails,
    VehicleDetails,
    VerificationStatus,
)
from estate_modules.assets.workflows import ASSET_VERIFICATION_WORKFLOW
from estate_modules.assets.ledger import AssetLedger

__all__ = [
    "Asset",
    "AssetType",
    "BusinessDetails",
    "CoOwner",
    "Encumbrance",
    "EncumbranceType",
    "FinancialDetails",
    "LandDetails",
    "OtherDetails",
    "VehicleDetails",
    "VerificationStatus",
    "ASSET_VERIFICATION_WORKFLOW",
    "AssetLedger",
]
