"""
Estate Lifecycle Workflow (``estate_modules.estate.workflows``).

    DRAFT -> ACTIVE                    (activate)
    {DRAFT, ACTIVE} -> FROZEN          (freeze)
    FROZEN -> ACTIVE                   (unfreeze, reason length guard)
    ACTIVE -> CLOSED                   (close, readiness guard)

CLOSED is terminal.  FROZEN <-> ACTIVE is the only non-monotonic edge.
"""

from estate_kernel.domain.workflow import Guard, Transition, Workflow
from estate_kernel.logging_config import get_logger

logger = get_logger("modules.estate.workflows")

UNFREEZE_REASON_LENGTH = Guard(
    name="unfreeze_reason_length",
    description="Unfreeze reason meets the configured minimum length",
)

DISTRIBUTION_READY = Guard(
    name="distribution_ready",
    description="No readiness blockers remain",
)

ESTATE_WORKFLOW = Workflow(
    name="estate_lifecycle",
    description="Administration of a deceased person's estate",
    initial_state="draft",
    states=("draft", "active", "frozen", "closed"),
    transitions=(
        Transition("draft", "active", action="activate"),
        Transition("draft", "frozen", action="freeze"),
        Transition("active", "frozen", action="freeze"),
        Transition("frozen", "active", action="unfreeze", guard=UNFREEZE_REASON_LENGTH),
        Transition("active", "closed", action="close", guard=DISTRIBUTION_READY),
    ),
    terminal_states=("closed",),
)

logger.info(
    "estate_workflow_defined",
    extra={
        "workflow": ESTATE_WORKFLOW.name,
        "states": len(ESTATE_WORKFLOW.states),
        "transitions": len(ESTATE_WORKFLOW.transitions),
        "guards": [UNFREEZE_REASON_LENGTH.name, DISTRIBUTION_READY.name],
    },
)
