"""
Debt Workflows (``estate_modules.debts.workflows``).

Declares the debt status machine.  Payable states are RECORDED and
PARTIALLY_PAID; DISPUTED debts leave the payable set until resolved back
to RECORDED.  PAID, WRITTEN_OFF and STATUTE_BARRED are terminal.
"""

from estate_kernel.domain.workflow import Guard, Transition, Workflow
from estate_kernel.logging_config import get_logger

logger = get_logger("modules.debts.workflows")

PRIORITY_GATE = Guard(
    name="priority_gate",
    description="No payable debt of a strictly higher tier remains outstanding",
)

DEBT_WORKFLOW = Workflow(
    name="estate_debt",
    description="Lifecycle of an estate liability",
    initial_state="recorded",
    states=(
        "recorded",
        "disputed",
        "partially_paid",
        "paid",
        "written_off",
        "statute_barred",
    ),
    transitions=(
        Transition("recorded", "partially_paid", action="pay_partial", guard=PRIORITY_GATE),
        Transition("recorded", "paid", action="pay_full", guard=PRIORITY_GATE),
        Transition("partially_paid", "partially_paid", action="pay_partial", guard=PRIORITY_GATE),
        Transition("partially_paid", "paid", action="pay_full", guard=PRIORITY_GATE),
        Transition("recorded", "disputed", action="dispute"),
        Transition("disputed", "recorded", action="resolve"),
        Transition("recorded", "recorded", action="write_off_partial"),
        Transition("partially_paid", "partially_paid", action="write_off_partial"),
        Transition("recorded", "written_off", action="write_off"),
        Transition("partially_paid", "written_off", action="write_off"),
        Transition("disputed", "written_off", action="write_off"),
        Transition("recorded", "statute_barred", action="statute_bar"),
        Transition("partially_paid", "statute_barred", action="statute_bar"),
    ),
    terminal_states=("paid", "written_off", "statute_barred"),
)

logger.info(
    "debt_workflow_defined",
    extra={
        "workflow": DEBT_WORKFLOW.name,
        "states": len(DEBT_WORKFLOW.states),
        "transitions": len(DEBT_WORKFLOW.transitions),
        "guards": [PRIORITY_GATE.name],
    },
)
