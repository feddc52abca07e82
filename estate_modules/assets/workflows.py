"""
Asset Workflows (``estate_modules.assets.workflows``).

Verification lifecycle:

    UNVERIFIED -> PENDING_VERIFICATION -> {VERIFIED, REJECTED, DISPUTED}
    VERIFIED -> DISPUTED
    DISPUTED -> {VERIFIED, REJECTED}
    REJECTED is terminal.
"""

from estate_kernel.domain.workflow import Guard, Transition, Workflow
from estate_kernel.logging_config import get_logger

logger = get_logger("modules.assets.workflows")

VERIFIER_EVIDENCE = Guard(
    name="verifier_evidence",
    description="Verification or rejection cites the supporting document review",
)

ASSET_VERIFICATION_WORKFLOW = Workflow(
    name="asset_verification",
    description="Verification of a declared estate asset",
    initial_state="unverified",
    states=(
        "unverified",
        "pending_verification",
        "verified",
        "rejected",
        "disputed",
    ),
    transitions=(
        Transition("unverified", "pending_verification", action="submit"),
        Transition("pending_verification", "verified", action="verify", guard=VERIFIER_EVIDENCE),
        Transition("pending_verification", "rejected", action="reject", guard=VERIFIER_EVIDENCE),
        Transition("pending_verification", "disputed", action="dispute"),
        Transition("verified", "disputed", action="dispute"),
        Transition("disputed", "verified", action="verify", guard=VERIFIER_EVIDENCE),
        Transition("disputed", "rejected", action="reject", guard=VERIFIER_EVIDENCE),
    ),
    terminal_states=("rejected",),
)

logger.info(
    "asset_workflow_defined",
    extra={
        "workflow": ASSET_VERIFICATION_WORKFLOW.name,
        "states": len(ASSET_VERIFICATION_WORKFLOW.states),
        "transitions": len(ASSET_VERIFICATION_WORKFLOW.transitions),
    },
)
