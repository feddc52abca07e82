"""
Tests for the Workflow value object and the declared settlement machines.

Every ledger's status enum must align with its workflow's states, terminal
states must have no outgoing transitions, and out-of-order actions must be
refused by ``advance`` with the ledger's typed transition error.
"""

from uuid import uuid4

import pytest

from estate_kernel.domain.workflow import Transition, Workflow
from estate_kernel.exceptions import (
    InvalidDebtTransitionError,
    InvalidEstateTransitionError,
)
from estate_modules.assets.models import VerificationStatus
from estate_modules.assets.workflows import ASSET_VERIFICATION_WORKFLOW
from estate_modules.base import advance
from estate_modules.claims.models import ClaimStatus
from estate_modules.claims.workflows import CLAIM_WORKFLOW
from estate_modules.debts.models import DebtStatus
from estate_modules.debts.workflows import DEBT_WORKFLOW
from estate_modules.estate.models import EstateStatus
from estate_modules.estate.workflows import ESTATE_WORKFLOW
from estate_modules.gifts.models import GiftStatus
from estate_modules.gifts.workflows import GIFT_WORKFLOW
from estate_modules.liquidation.models import LiquidationStatus
from estate_modules.liquidation.workflows import LIQUIDATION_WORKFLOW

ALL_WORKFLOWS = [
    (ESTATE_WORKFLOW, EstateStatus),
    (ASSET_VERIFICATION_WORKFLOW, VerificationStatus),
    (DEBT_WORKFLOW, DebtStatus),
    (LIQUIDATION_WORKFLOW, LiquidationStatus),
    (GIFT_WORKFLOW, GiftStatus),
    (CLAIM_WORKFLOW, ClaimStatus),
]


class TestWorkflowValidation:
    """Construction-time checks on Workflow."""

    def test_initial_state_must_be_declared(self):
        with pytest.raises(ValueError, match="initial state"):
            Workflow(
                name="broken",
                description="",
                initial_state="missing",
                states=("a",),
                transitions=(),
            )

    def test_transition_to_unknown_state_rejected(self):
        with pytest.raises(ValueError, match="unknown state"):
            Workflow(
                name="broken",
                description="",
                initial_state="a",
                states=("a",),
                transitions=(Transition("a", "b", action="go"),),
            )

    def test_terminal_state_cannot_have_outgoing_transition(self):
        with pytest.raises(ValueError, match="terminal state"):
            Workflow(
                name="broken",
                description="",
                initial_state="a",
                states=("a", "b"),
                transitions=(Transition("b", "a", action="back"),),
                terminal_states=("b",),
            )


class TestDeclaredWorkflows:
    """Each status enum matches the states of its workflow."""

    @pytest.mark.parametrize("workflow,status_type", ALL_WORKFLOWS, ids=[w.name for w, _ in ALL_WORKFLOWS])
    def test_enum_aligned_with_states(self, workflow, status_type):
        assert {s.value for s in status_type} == set(workflow.states)

    @pytest.mark.parametrize("workflow,status_type", ALL_WORKFLOWS, ids=[w.name for w, _ in ALL_WORKFLOWS])
    def test_initial_state_is_a_status(self, workflow, status_type):
        status_type(workflow.initial_state)

    def test_closed_estate_is_terminal(self):
        assert ESTATE_WORKFLOW.is_terminal("closed")
        assert ESTATE_WORKFLOW.allowed_actions("closed") == ()

    def test_frozen_estate_only_unfreezes(self):
        assert ESTATE_WORKFLOW.allowed_actions("frozen") == ("unfreeze",)

    def test_liquidation_is_linear(self):
        order = ["initiated", "submitted", "approved", "sold", "proceeds_received"]
        actions = ["submit", "approve", "record_sale", "receive_proceeds"]
        for state, action, expected in zip(order, actions, order[1:]):
            assert LIQUIDATION_WORKFLOW.find_transition(state, action).to_state == expected

    def test_every_active_liquidation_state_can_cancel(self):
        for state in ["initiated", "submitted", "approved", "sold"]:
            assert LIQUIDATION_WORKFLOW.find_transition(state, "cancel") is not None

    def test_debt_payment_guarded_by_priority_gate(self):
        for t in DEBT_WORKFLOW.transitions:
            if t.action in ("pay_full", "pay_partial"):
                assert t.guard is not None and t.guard.name == "priority_gate"

    def test_disputed_debt_cannot_be_paid(self):
        assert DEBT_WORKFLOW.find_transition("disputed", "pay_full") is None
        assert DEBT_WORKFLOW.find_transition("disputed", "pay_partial") is None


class TestAdvance:
    """The shared transition helper."""

    def test_returns_target_status(self):
        status = advance(
            ESTATE_WORKFLOW, EstateStatus, EstateStatus.DRAFT, "activate",
            uuid4(), InvalidEstateTransitionError,
        )
        assert status == EstateStatus.ACTIVE

    def test_raises_typed_error(self):
        debt_id = uuid4()
        with pytest.raises(InvalidDebtTransitionError) as exc_info:
            advance(
                DEBT_WORKFLOW, DebtStatus, DebtStatus.PAID, "pay_partial",
                debt_id, InvalidDebtTransitionError,
            )
        assert exc_info.value.entity_id == str(debt_id)
        assert exc_info.value.current_state == "paid"
        assert exc_info.value.action == "pay_partial"
