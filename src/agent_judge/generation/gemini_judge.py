"""Google Gemini judge client using the google-genai SDK."""

from __future__ import annotations

from google import genai
from google.genai import types
from pydantic import BaseModel

from agent_judge.exceptions import JudgeError
from agent_judge.models.domain import JudgeResponse
from agent_judge.observability.logger import get_logger

logger = get_logger("gemini_judge")

_ROLE_MAP = {"user": "user", "assistant": "model"}


class GeminiJudgeClient:
    def __init__(self, api_key: str, model: str = "gemini-2.0-flash") -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model

    @property
    def model(self) -> str:
        return self._model

    async def invoke(
        self,
        system: str | None,
        messages: list[dict[str, str]],
        output_schema: type[BaseModel],
        max_tokens: int = 1024,
        temperature: float = 0.0,
    ) -> JudgeResponse:
        try:
            config = types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_tokens,
                response_mime_type="application/json",
                response_schema=output_schema,
            )
            if system:
                config.system_instruction = system

            contents = [
                types.Content(
                    role=_ROLE_MAP[m["role"]],
                    parts=[types.Part(text=m["content"])],
                )
                for m in messages
            ]

            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.error("judge_call_failed", model=self._model, error=str(e))
            raise JudgeError(f"Gemini judge call failed: {e}") from e

        usage = response.usage_metadata
        input_tokens = (usage.prompt_token_count or 0) if usage else 0
        output_tokens = (usage.candidates_token_count or 0) if usage else 0

        logger.debug(
            "judge_call_complete",
            model=self._model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
        return JudgeResponse(
            text=response.text or "",
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
