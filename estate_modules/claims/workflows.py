"""
Dependant Claim Workflows (``estate_modules.claims.workflows``).

    FILED -> EVIDENCE_SUBMITTED -> VERIFIED -> SETTLED
    {FILED, EVIDENCE_SUBMITTED, VERIFIED} -> REJECTED
"""

from estate_kernel.domain.workflow import Guard, Transition, Workflow
from estate_kernel.logging_config import get_logger

logger = get_logger("modules.claims.workflows")

WITHIN_DISTRIBUTABLE_POOL = Guard(
    name="within_distributable_pool",
    description="Allocation does not exceed the estate's distributable pool",
)

CLAIM_WORKFLOW = Workflow(
    name="dependant_claim",
    description="Dependant claim for provision out of the estate",
    initial_state="filed",
    states=("filed", "evidence_submitted", "verified", "rejected", "settled"),
    transitions=(
        Transition("filed", "evidence_submitted", action="add_evidence"),
        Transition("evidence_submitted", "evidence_submitted", action="add_evidence"),
        Transition("evidence_submitted", "verified", action="verify"),
        Transition("filed", "rejected", action="reject"),
        Transition("evidence_submitted", "rejected", action="reject"),
        Transition("verified", "rejected", action="reject"),
        Transition("verified", "settled", action="settle", guard=WITHIN_DISTRIBUTABLE_POOL),
    ),
    terminal_states=("rejected", "settled"),
)

logger.info(
    "claim_workflow_defined",
    extra={
        "workflow": CLAIM_WORKFLOW.name,
        "states": len(CLAIM_WORKFLOW.states),
        "transitions": len(CLAIM_WORKFLOW.transitions),
    },
)
