"""Variety intervention: new-ideas nudge once an active agent starts recycling ideas."""

from __future__ import annotations

from agent_judge.config.constants import VARIETY_WINDOW
from agent_judge.interventions.intervention import Intervention
from agent_judge.interventions.nudge_templates import get_nudge_text
from agent_judge.models.domain import InterventionTarget
from agent_judge.protocols.storage import InterventionLogWriter
from agent_judge.scoring.proposition_engine import PropositionEngine

RECYCLING_CLAIM = (
    "The agent is recycling the same ideas and not proposing anything genuinely new "
    "or different."
)

DEFAULT_MESSAGE_THRESHOLD = 7


def create_variety_intervention(
    agent_id: str,
    channel_id: str,
    trajectory_length: int,
    engine: PropositionEngine,
    log_store: InterventionLogWriter | None = None,
    message_threshold: int = DEFAULT_MESSAGE_THRESHOLD,
) -> Intervention:
    """Functional length gate first, so short conversations never reach the judge."""
    targets = [
        InterventionTarget(kind="agent", id=agent_id),
        InterventionTarget(kind="channel", id=channel_id),
    ]
    return (
        Intervention(targets, engine, log_store)
        .set_intervention_type("variety")
        .set_functional_precondition(lambda _targets: trajectory_length >= message_threshold)
        .set_textual_precondition(RECYCLING_CLAIM)
        .set_effect(lambda _targets: get_nudge_text(agent_id, "new_ideas"))
        .set_trajectory_window(*VARIETY_WINDOW)
    )
