"""Per-turn intervention evaluation for an agent about to speak in a channel."""

from __future__ import annotations

from agent_judge.interventions.anti_convergence import create_anti_convergence_intervention
from agent_judge.interventions.variety import (
    DEFAULT_MESSAGE_THRESHOLD,
    create_variety_intervention,
)
from agent_judge.models.domain import (
    ZERO_USAGE,
    ChannelMessage,
    InterventionContext,
    InterventionTarget,
    ScoringContext,
    TokenUsage,
    TrajectoryEntry,
)
from agent_judge.observability.logger import get_logger
from agent_judge.protocols.storage import InterventionLogWriter
from agent_judge.scoring.proposition_engine import PropositionEngine

logger = get_logger("intervention_orchestrator")


def build_channel_trajectory(
    agent_id: str, messages: list[ChannelMessage]
) -> list[TrajectoryEntry]:
    return [
        TrajectoryEntry(
            kind="action" if m.user_id == agent_id else "stimulus",
            agent_name=m.user_id,
            text=m.text,
        )
        for m in messages
    ]


async def evaluate_interventions(
    agent_id: str,
    channel_id: str | None,
    recent_messages: list[ChannelMessage],
    engine: PropositionEngine,
    log_store: InterventionLogWriter | None = None,
    message_threshold: int = DEFAULT_MESSAGE_THRESHOLD,
) -> tuple[str | None, TokenUsage]:
    """Run anti-convergence then variety; return joined nudge text and token usage.

    Direct messages (no channel) are skipped. Any error fails open with no nudge.
    """
    if not channel_id:
        logger.info("interventions_skipped", agent_id=agent_id, reason="dm")
        return None, ZERO_USAGE

    try:
        trajectory = build_channel_trajectory(agent_id, recent_messages)
        context = InterventionContext(
            trajectory=trajectory,
            scoring_context=ScoringContext(trajectory=trajectory),
            targets=[
                InterventionTarget(kind="agent", id=agent_id),
                InterventionTarget(kind="channel", id=channel_id),
            ],
        )
        interventions = [
            create_anti_convergence_intervention(agent_id, channel_id, engine, log_store),
            create_variety_intervention(
                agent_id,
                channel_id,
                len(trajectory),
                engine,
                log_store,
                message_threshold=message_threshold,
            ),
        ]

        usage = TokenUsage()
        nudges: list[str] = []
        fired: dict[str, bool] = {}
        for intervention in interventions:
            result = await intervention.evaluate(context)
            usage = usage + result.token_usage
            fired[intervention.intervention_type] = result.fired
            if result.fired and result.nudge_text:
                nudges.append(result.nudge_text)
    except Exception as e:
        logger.error(
            "interventions_failed", agent_id=agent_id, channel_id=channel_id, error=str(e)
        )
        return None, ZERO_USAGE

    nudge_text = "\n".join(nudges) if nudges else None
    logger.info(
        "interventions_complete",
        agent_id=agent_id,
        channel_id=channel_id,
        fired=fired,
        has_nudge=nudge_text is not None,
        input_tokens=usage.input_tokens,
        output_tokens=usage.output_tokens,
    )
    return nudge_text, usage
