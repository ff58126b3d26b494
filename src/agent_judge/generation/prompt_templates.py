"""All prompt templates for the judge, the gate, and direct correction."""

from __future__ import annotations

SCORING_RUBRIC = """Score 0: The proposition is, without any doubt, completely false.
Score 1-2: The proposition has little support and is mostly false.
Score 3: Weak support: some evidence, but mostly contradicted.
Score 4-5: The evidence is mixed: the proposition is equally true and false.
Score 6: Fair support: more true than false, with notable exceptions.
Score 7-8: The proposition is well supported and mostly true.
Score 9: The proposition is, without any doubt, completely true.

Scoring principles:
- If the data required to evaluate the proposition is not present, assign score 9 (assume true unless contradicted).
- Assign 9 only when the evidence is the best possible and ALL parts support the claim.
- Assign 0 only when the evidence is the worst possible and ALL parts contradict the claim.
- Be VERY rigorous. When in doubt, assign the LOWER score.
- Contradictions ALWAYS override positive evidence. Do not dismiss them as specification errors.
- Evaluate EACH relevant element individually; the final score is the average."""

JUDGE_SYSTEM = """You are an expert evaluator assessing agent behavior. Use the following rubric:

{rubric}"""

JUDGE_PERSONA_SECTION = """

You are evaluating the following character:
{persona}"""

SCORE_PROMPT = """Evaluate the following claim about the agent's behavior:

CLAIM: {claim}

TRAJECTORY:
{trajectory}

Respond with your evaluation."""

CHECK_PROMPT = """Evaluate whether the following claim about the agent's behavior is true:

CLAIM: {claim}

TRAJECTORY:
{trajectory}

Respond with your evaluation."""

BATCH_SCORE_PROMPT = """Evaluate each of the following claims about the agent's behavior:

{numbered_claims}

TRAJECTORY:
{trajectory}

Respond with your evaluation for each claim, in the same order."""

DOUBLE_CHECK_PROMPT = (
    "Are you sure? Please revise your evaluation to make it as correct as possible."
)

DIRECT_CORRECTION_PROMPT = """You are a text correction assistant. An AI agent named "{agent_name}" generated a message that failed quality checks. Your job is to rewrite the message to fix the quality issues while preserving the agent's intended meaning and voice.{persona_section}{conversation_section}

The original message:
"{text}"

Quality check failures and corrective rules:
{rules}

Rewrite the message to satisfy ALL corrective rules. Preserve the agent's voice and intended meaning as much as possible."""


def format_trajectory(entries: list) -> str:
    """Render trajectory entries one per line; actions and stimuli use distinct markers."""
    lines = []
    for entry in entries:
        if entry.kind == "action":
            lines.append(f"{entry.agent_name} acts: {entry.text}")
        else:
            lines.append(f"--> {entry.agent_name}: {entry.text}")
    return "\n".join(lines)


def build_judge_system_prompt(persona: str | None = None) -> str:
    system = JUDGE_SYSTEM.format(rubric=SCORING_RUBRIC)
    if persona:
        system += JUDGE_PERSONA_SECTION.format(persona=persona)
    return system


def format_numbered_claims(claims: list[str]) -> str:
    return "\n".join(f"{i}. {claim}" for i, claim in enumerate(claims, 1))


def build_direct_correction_prompt(
    text: str,
    failed_dimensions: list,
    agent_name: str,
    persona: str | None = None,
    conversation_context: list[str] | None = None,
) -> str:
    rules = "\n".join(
        f"- {d.dimension} (score {d.score}/{d.threshold}): {d.reasoning}\n"
        f"  Rule: {d.recommendation}"
        for d in failed_dimensions
    )
    persona_section = f"\n\nThe agent's persona:\n{persona}" if persona else ""
    conversation_section = ""
    if conversation_context:
        recent = "\n".join(f"- {m}" for m in conversation_context)
        conversation_section = f"\n\nRecent conversation:\n{recent}"

    return DIRECT_CORRECTION_PROMPT.format(
        agent_name=agent_name,
        persona_section=persona_section,
        conversation_section=conversation_section,
        text=text,
        rules=rules,
    )
