"""
Liquidation Workflows (``estate_modules.liquidation.workflows``).

    INITIATED -> SUBMITTED -> APPROVED -> SOLD -> PROCEEDS_RECEIVED
    any non-terminal state -> CANCELLED
"""

from estate_kernel.domain.workflow import Guard, Transition, Workflow
from estate_kernel.logging_config import get_logger

logger = get_logger("modules.liquidation.workflows")

PROCEEDS_WITHIN_SALE_PRICE = Guard(
    name="proceeds_within_sale_price",
    description="Proceeds received do not exceed the recorded sale price",
)

_ACTIVE = ("initiated", "submitted", "approved", "sold")

LIQUIDATION_WORKFLOW = Workflow(
    name="asset_liquidation",
    description="Conversion of an estate asset into cash",
    initial_state="initiated",
    states=_ACTIVE + ("proceeds_received", "cancelled"),
    transitions=(
        Transition("initiated", "submitted", action="submit"),
        Transition("submitted", "approved", action="approve"),
        Transition("approved", "sold", action="record_sale"),
        Transition("sold", "proceeds_received", action="receive_proceeds",
                   guard=PROCEEDS_WITHIN_SALE_PRICE),
    ) + tuple(Transition(state, "cancelled", action="cancel") for state in _ACTIVE),
    terminal_states=("proceeds_received", "cancelled"),
)

logger.info(
    "liquidation_workflow_defined",
    extra={
        "workflow": LIQUIDATION_WORKFLOW.name,
        "states": len(LIQUIDATION_WORKFLOW.states),
        "transitions": len(LIQUIDATION_WORKFLOW.transitions),
    },
)
