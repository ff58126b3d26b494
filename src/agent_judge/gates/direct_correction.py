"""Direct correction: one judge rewrite of a failing message, failing open."""

from __future__ import annotations

import asyncio
import json

from agent_judge.config.settings import Settings
from agent_judge.exceptions import CorrectionError
from agent_judge.generation.prompt_templates import build_direct_correction_prompt
from agent_judge.models.domain import (
    ZERO_USAGE,
    DirectCorrectionResult,
    FailedDimension,
    JudgeResponse,
)
from agent_judge.models.schemas import CorrectionResponse
from agent_judge.observability.logger import get_logger
from agent_judge.protocols.judge import JudgeClient

logger = get_logger("direct_correction")


def extract_corrected_text(raw: str) -> str:
    """corrected_text from a JSON payload, else the raw response trimmed."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("corrected_text"), str):
        return data["corrected_text"].strip()
    return raw.strip()


class DirectCorrector:
    def __init__(self, judge: JudgeClient, settings: Settings) -> None:
        self._judge = judge
        self._timeout_s = settings.direct_correction_timeout_s
        self._max_tokens = settings.direct_correction_max_tokens

    async def _rewrite(self, prompt: str) -> JudgeResponse:
        response = await asyncio.wait_for(
            self._judge.invoke(
                None,
                [{"role": "user", "content": prompt}],
                CorrectionResponse,
                max_tokens=self._max_tokens,
            ),
            timeout=self._timeout_s,
        )
        if not response.text or not response.text.strip():
            raise CorrectionError("Empty correction response")
        return response

    async def correct(
        self,
        text: str,
        failed_dimensions: list[FailedDimension],
        agent_name: str,
        persona: str | None = None,
        conversation_context: list[str] | None = None,
    ) -> DirectCorrectionResult:
        prompt = build_direct_correction_prompt(
            text, failed_dimensions, agent_name, persona, conversation_context
        )

        try:
            response = await self._rewrite(prompt)
            corrected = extract_corrected_text(response.text)
            if not corrected:
                raise CorrectionError("Correction payload had no text")
        except Exception as e:
            logger.warning(
                "direct_correction_failed_open",
                agent_name=agent_name,
                error_type=type(e).__name__,
                error=str(e),
            )
            return DirectCorrectionResult(corrected_text=text, token_usage=ZERO_USAGE)

        logger.info(
            "direct_correction_complete",
            agent_name=agent_name,
            failed_dimensions=len(failed_dimensions),
            original_length=len(text),
            corrected_length=len(corrected),
        )
        return DirectCorrectionResult(
            corrected_text=corrected, token_usage=response.token_usage
        )
