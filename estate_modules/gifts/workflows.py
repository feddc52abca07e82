"""
Gift Workflows (``estate_modules.gifts.workflows``).

    RECORDED -> CONTESTED -> RESOLVED
    {RECORDED, CONTESTED, RESOLVED} -> RECLAIMED (terminal)
"""

from estate_kernel.domain.workflow import Transition, Workflow
from estate_kernel.logging_config import get_logger

logger = get_logger("modules.gifts.workflows")

GIFT_WORKFLOW = Workflow(
    name="gift_hotchpot",
    description="Lifetime gift brought into hotchpot",
    initial_state="recorded",
    states=("recorded", "contested", "resolved", "reclaimed"),
    transitions=(
        Transition("recorded", "contested", action="contest"),
        Transition("contested", "resolved", action="resolve"),
        Transition("recorded", "reclaimed", action="reclaim"),
        Transition("contested", "reclaimed", action="reclaim"),
        Transition("resolved", "reclaimed", action="reclaim"),
    ),
    terminal_states=("reclaimed",),
)

logger.info(
    "gift_workflow_defined",
    extra={
        "workflow": GIFT_WORKFLOW.name,
        "states": len(GIFT_WORKFLOW.states),
        "transitions": len(GIFT_WORKFLOW.transitions),
    },
)
