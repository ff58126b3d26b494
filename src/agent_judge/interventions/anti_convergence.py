"""Anti-convergence intervention: devil's-advocate nudge when a channel agrees too readily."""

from __future__ import annotations

from agent_judge.config.constants import ANTI_CONVERGENCE_WINDOW
from agent_judge.interventions.intervention import Intervention
from agent_judge.interventions.nudge_templates import get_nudge_text
from agent_judge.models.domain import InterventionTarget
from agent_judge.protocols.storage import InterventionLogWriter
from agent_judge.scoring.proposition_engine import PropositionEngine

CONVERGENCE_CLAIM = (
    "The agents in this conversation are converging on the same opinions and agreeing "
    "with each other too readily, without meaningful pushback or diverse perspectives."
)


def create_anti_convergence_intervention(
    agent_id: str,
    channel_id: str,
    engine: PropositionEngine,
    log_store: InterventionLogWriter | None = None,
) -> Intervention:
    targets = [
        InterventionTarget(kind="agent", id=agent_id),
        InterventionTarget(kind="channel", id=channel_id),
    ]
    return (
        Intervention(targets, engine, log_store)
        .set_intervention_type("anti_convergence")
        .set_textual_precondition(CONVERGENCE_CLAIM)
        .set_effect(lambda _targets: get_nudge_text(agent_id, "devils_advocate"))
        .set_trajectory_window(*ANTI_CONVERGENCE_WINDOW)
    )
