"""Proposition files on disk.

Layout is one directory per dimension under a root, each holding a
``_default.yaml`` and optional ``<agent_id>.yaml`` additions::

    propositions/
      fluency/
        _default.yaml
        michael.yaml

Claims may carry ``{{agent_name}}``-style placeholders that are filled at
load time; placeholders without a value are left as written.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal

import yaml
from pydantic import ValidationError

from agent_judge.exceptions import ConfigurationError
from agent_judge.models.domain import Proposition
from agent_judge.models.schemas import PropositionFileSchema
from agent_judge.observability.logger import get_logger

logger = get_logger("proposition_loader")

DEFAULT_FILE = "_default.yaml"
AGENT_FILE_SUFFIXES = (".yaml", ".yml")

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def fill_template_variables(text: str, variables: Mapping[str, str]) -> str:
    def _sub(match: re.Match) -> str:
        value = variables.get(match.group(1))
        return match.group(0) if value is None else value

    return _PLACEHOLDER.sub(_sub, text)


@dataclass
class PropositionFile:
    dimension: str
    propositions: list[Proposition] = field(default_factory=list)
    agent_id: str | None = None
    include_personas: bool = True
    hard: bool = False
    target_type: Literal["agent", "environment"] = "agent"
    first_n: int | None = None
    last_n: int | None = None

    def window(self, messages: list[str]) -> list[str]:
        """Apply first_n/last_n; with both set, keep head and tail without overlap."""
        if self.first_n is None and self.last_n is None:
            return list(messages)
        if self.last_n is None:
            return messages[: self.first_n]
        tail = messages[len(messages) - self.last_n :] if self.last_n else []
        if self.first_n is None:
            return tail
        if len(messages) <= self.first_n + self.last_n:
            return list(messages)
        return messages[: self.first_n] + tail


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read proposition file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in proposition file {path}: {e}") from e


def load_proposition_file(
    path: str | Path, variables: Mapping[str, str] | None = None
) -> PropositionFile:
    path = Path(path)
    try:
        parsed = PropositionFileSchema.model_validate(_read_yaml(path))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid proposition file {path}: {e}") from e

    variables = variables or {}
    propositions = [
        Proposition(
            id=entry.id,
            claim=fill_template_variables(entry.claim, variables),
            weight=entry.weight,
            inverted=entry.inverted,
            recommendation=entry.recommendations_for_improvement,
        )
        for entry in parsed.propositions
    ]
    logger.info(
        "proposition_file_loaded",
        path=str(path),
        dimension=parsed.dimension,
        proposition_count=len(propositions),
    )
    return PropositionFile(
        dimension=parsed.dimension,
        propositions=propositions,
        agent_id=parsed.agent_id,
        include_personas=parsed.include_personas,
        hard=parsed.hard,
        target_type=parsed.target_type,
        first_n=parsed.first_n,
        last_n=parsed.last_n,
    )


class PropositionLoader:
    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def _agent_file(self, dimension_dir: Path, agent_id: str) -> Path | None:
        for suffix in AGENT_FILE_SUFFIXES:
            candidate = dimension_dir / f"{agent_id}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    def load_for_dimension(
        self,
        dimension: str,
        agent_id: str | None = None,
        variables: Mapping[str, str] | None = None,
    ) -> PropositionFile:
        """Default propositions, followed by the agent's own when a file exists.

        The agent file's flags win; its window falls back to the default's.
        """
        dimension_dir = self._root / dimension
        base = load_proposition_file(dimension_dir / DEFAULT_FILE, variables)
        if agent_id is None:
            return base

        agent_path = self._agent_file(dimension_dir, agent_id)
        if agent_path is None:
            logger.info("agent_propositions_missing", dimension=dimension, agent_id=agent_id)
            return base

        extra = load_proposition_file(agent_path, variables)
        logger.info(
            "agent_propositions_merged",
            dimension=dimension,
            agent_id=agent_id,
            default_count=len(base.propositions),
            agent_count=len(extra.propositions),
        )
        return replace(
            extra,
            dimension=base.dimension,
            agent_id=agent_id,
            first_n=extra.first_n if extra.first_n is not None else base.first_n,
            last_n=extra.last_n if extra.last_n is not None else base.last_n,
            propositions=base.propositions + extra.propositions,
        )
