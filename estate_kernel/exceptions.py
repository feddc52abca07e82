"""
Typed Exception Hierarchy for the Estate Settlement Engine.

Every error raised by a ledger, engine or the aggregate is a subclass of
EstateKernelError. Each class carries:

  1. a machine-readable ``code`` class attribute (API safe),
  2. a ``kind`` class attribute naming its category, used by the command
     surface to build a CommandError without string parsing,
  3. structured attributes (ids, amounts, states) that survive logging and
     serialization.

Hierarchy:

    EstateKernelError (base)
    |
    +-- ValidationError                       kind=ValidationError
    |   +-- InvalidAmountError
    |   +-- CurrencyMismatchError
    |   +-- MissingFieldError
    |   +-- AssetDetailsMismatchError
    |   +-- CoOwnershipExceededError
    |   +-- UnfreezeReasonTooShortError
    |
    +-- StateConflictError                    kind=StateConflictError
    |   +-- EstateFrozenError
    |   +-- EstateClosedError
    |   +-- EstateNotReadyError
    |   +-- InvalidTransitionError
    |       +-- InvalidEstateTransitionError
    |       +-- InvalidAssetTransitionError
    |       +-- InvalidDebtTransitionError
    |       +-- InvalidLiquidationTransitionError
    |       +-- InvalidGiftTransitionError
    |       +-- InvalidClaimTransitionError
    |   +-- ActiveLiquidationExistsError
    |
    +-- PriorityViolationError                kind=PriorityViolationError
    |   +-- HigherPriorityDebtUnpaidError
    |
    +-- InsufficientFundsError                kind=InsufficientFundsError
    +-- InsufficientDistributablePoolError    kind=InsufficientDistributablePoolError
    +-- ConcurrentModificationError           kind=ConcurrentModificationError
    +-- NotFoundError                         kind=NotFoundError
        +-- EstateNotFoundError
        +-- AssetNotFoundError
        +-- DebtNotFoundError
        +-- LiquidationNotFoundError
        +-- GiftNotFoundError
        +-- ClaimNotFoundError

Handling:

    try:
        estate.pay_debt(...)
    except HigherPriorityDebtUnpaidError as e:
        render(e.code, blocking=e.blocking_debt_ids)

None of these represent a fatal process condition; all are recoverable by
the caller reformulating the command.
"""

from __future__ import annotations

from typing import Any


class EstateKernelError(Exception):
    """Base exception for all estate settlement errors."""

    code: str = "ESTATE_KERNEL_ERROR"
    kind: str = "EstateKernelError"

    def context(self) -> dict[str, Any]:
        """Structured attributes of this error, for rendering and logging."""
        return {
            k: v for k, v in vars(self).items()
            if not k.startswith("_") and k != "args"
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(EstateKernelError):
    """Malformed or missing command fields. Never retried automatically."""

    code: str = "VALIDATION_ERROR"
    kind: str = "ValidationError"

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidAmountError(ValidationError):
    """Amount is zero, negative or otherwise out of range."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, amount: str, reason: str):
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid {field} {amount}: {reason}", field=field)


class CurrencyMismatchError(ValidationError):
    """Money operation mixes two currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, operation: str, left: str, right: str):
        self.operation = operation
        self.left = left
        self.right = right
        super().__init__(
            f"Cannot {operation} Money with different currencies: {left} and {right}"
        )


class MissingFieldError(ValidationError):
    """Required command field is absent or blank."""

    code: str = "MISSING_FIELD"

    def __init__(self, field: str):
        super().__init__(f"Missing required field: {field}", field=field)


class AssetDetailsMismatchError(ValidationError):
    """Type-specific payload does not match the asset type tag."""

    code: str = "ASSET_DETAILS_MISMATCH"

    def __init__(self, asset_type: str, details_type: str):
        self.asset_type = asset_type
        self.details_type = details_type
        super().__init__(
            f"Asset of type {asset_type} cannot carry {details_type}",
            field="details",
        )


class CoOwnershipExceededError(ValidationError):
    """Adding a co-owner would push total shares above 100%."""

    code: str = "CO_OWNERSHIP_EXCEEDED"

    def __init__(self, asset_id: str, current_total: str, requested: str):
        self.asset_id = asset_id
        self.current_total = current_total
        self.requested = requested
        super().__init__(
            f"Co-owner shares on asset {asset_id} would exceed 100%: "
            f"current={current_total}%, requested={requested}%",
            field="share_percentage",
        )


class UnfreezeReasonTooShortError(ValidationError):
    """Unfreeze justification is shorter than the configured minimum."""

    code: str = "UNFREEZE_REASON_TOO_SHORT"

    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Unfreeze reason must be at least {minimum} characters, got {length}",
            field="reason",
        )


# ---------------------------------------------------------------------------
# State conflicts
# ---------------------------------------------------------------------------


class StateConflictError(EstateKernelError):
    """Operation is invalid for the current entity state."""

    code: str = "STATE_CONFLICT"
    kind: str = "StateConflictError"


class EstateFrozenError(StateConflictError):
    """Estate is frozen; only unfreeze and queries are permitted."""

    code: str = "ESTATE_FROZEN"

    def __init__(self, estate_id: str, operation: str, freeze_reason: str | None):
        self.estate_id = estate_id
        self.operation = operation
        self.freeze_reason = freeze_reason
        super().__init__(
            f"Estate {estate_id} is frozen; cannot {operation}"
            + (f" (reason: {freeze_reason})" if freeze_reason else "")
        )


class EstateClosedError(StateConflictError):
    """Estate is closed; it accepts no further mutations."""

    code: str = "ESTATE_CLOSED"

    def __init__(self, estate_id: str, operation: str):
        self.estate_id = estate_id
        self.operation = operation
        super().__init__(f"Estate {estate_id} is closed; cannot {operation}")


class EstateNotReadyError(StateConflictError):
    """Closure attempted while distribution readiness has blockers."""

    code: str = "ESTATE_NOT_READY"

    def __init__(self, estate_id: str, blockers: list[str]):
        self.estate_id = estate_id
        self.blockers = blockers
        super().__init__(
            f"Estate {estate_id} is not ready for distribution: {'; '.join(blockers)}"
        )


class InvalidTransitionError(StateConflictError):
    """Entity cannot move from its current state via the requested action."""

    code: str = "INVALID_TRANSITION"
    entity: str = "entity"

    def __init__(self, entity_id: str, current_state: str, action: str):
        self.entity_id = entity_id
        self.current_state = current_state
        self.action = action
        super().__init__(
            f"Cannot {action} {self.entity} {entity_id} in state {current_state}"
        )


class InvalidEstateTransitionError(InvalidTransitionError):
    code: str = "INVALID_ESTATE_TRANSITION"
    entity: str = "estate"


class InvalidAssetTransitionError(InvalidTransitionError):
    code: str = "INVALID_ASSET_TRANSITION"
    entity: str = "asset"


class InvalidDebtTransitionError(InvalidTransitionError):
    code: str = "INVALID_DEBT_TRANSITION"
    entity: str = "debt"


class InvalidLiquidationTransitionError(InvalidTransitionError):
    """Liquidation step called out of order."""

    code: str = "INVALID_LIQUIDATION_TRANSITION"
    entity: str = "liquidation"


class InvalidGiftTransitionError(InvalidTransitionError):
    code: str = "INVALID_GIFT_TRANSITION"
    entity: str = "gift"


class InvalidClaimTransitionError(InvalidTransitionError):
    code: str = "INVALID_CLAIM_TRANSITION"
    entity: str = "claim"


class ActiveLiquidationExistsError(StateConflictError):
    """Asset already has a non-terminal liquidation, or was already liquidated."""

    code: str = "ACTIVE_LIQUIDATION_EXISTS"

    def __init__(self, asset_id: str, liquidation_id: str, status: str):
        self.asset_id = asset_id
        self.liquidation_id = liquidation_id
        self.status = status
        super().__init__(
            f"Asset {asset_id} already has liquidation {liquidation_id} ({status})"
        )


# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------


class PriorityViolationError(EstateKernelError):
    """Payment would skip the statutory queue."""

    code: str = "PRIORITY_VIOLATION"
    kind: str = "PriorityViolationError"


class HigherPriorityDebtUnpaidError(PriorityViolationError):
    """Manual payment targets a debt while higher-tier debts remain payable."""

    code: str = "HIGHER_PRIORITY_DEBT_UNPAID"

    def __init__(
        self,
        debt_id: str,
        tier: str,
        blocking_debt_ids: list[str],
        blocking_tiers: list[str],
    ):
        self.debt_id = debt_id
        self.tier = tier
        self.blocking_debt_ids = blocking_debt_ids
        self.blocking_tiers = blocking_tiers
        super().__init__(
            f"Cannot pay debt {debt_id} ({tier}): higher-priority debts unpaid: "
            f"{', '.join(blocking_debt_ids)}"
        )


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class InsufficientFundsError(EstateKernelError):
    """Requested amount exceeds the estate's available cash."""

    code: str = "INSUFFICIENT_FUNDS"
    kind: str = "InsufficientFundsError"

    def __init__(self, requested: str, available: str, currency: str):
        self.requested = requested
        self.available = available
        self.currency = currency
        super().__init__(
            f"Insufficient cash: requested {requested} {currency}, "
            f"available {available} {currency}"
        )


class InsufficientDistributablePoolError(EstateKernelError):
    """Claim allocation exceeds the distributable pool."""

    code: str = "INSUFFICIENT_DISTRIBUTABLE_POOL"
    kind: str = "InsufficientDistributablePoolError"

    def __init__(self, claim_id: str, allocation: str, pool: str, currency: str):
        self.claim_id = claim_id
        self.allocation = allocation
        self.pool = pool
        self.currency = currency
        super().__init__(
            f"Cannot settle claim {claim_id} for {allocation} {currency}: "
            f"distributable pool is {pool} {currency}"
        )


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class ConcurrentModificationError(EstateKernelError):
    """Stored version differs from the version the command was computed on."""

    code: str = "CONCURRENT_MODIFICATION"
    kind: str = "ConcurrentModificationError"

    def __init__(self, estate_id: str, expected_version: int, actual_version: int | None):
        self.estate_id = estate_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Estate {estate_id} was modified concurrently: "
            f"expected version {expected_version}, found {actual_version}"
        )


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class NotFoundError(EstateKernelError):
    """Referenced entity id is absent."""

    code: str = "NOT_FOUND"
    kind: str = "NotFoundError"
    entity: str = "entity"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity.capitalize()} not found: {entity_id}")


class EstateNotFoundError(NotFoundError):
    code: str = "ESTATE_NOT_FOUND"
    entity: str = "estate"


class AssetNotFoundError(NotFoundError):
    code: str = "ASSET_NOT_FOUND"
    entity: str = "asset"


class DebtNotFoundError(NotFoundError):
    code: str = "DEBT_NOT_FOUND"
    entity: str = "debt"


class LiquidationNotFoundError(NotFoundError):
    code: str = "LIQUIDATION_NOT_FOUND"
    entity: str = "liquidation"


class GiftNotFoundError(NotFoundError):
    code: str = "GIFT_NOT_FOUND"
    entity: str = "gift"


class ClaimNotFoundError(NotFoundError):
    code: str = "CLAIM_NOT_FOUND"
    entity: str = "claim"
