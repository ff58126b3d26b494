"""Custom exception hierarchy for the agent judge engine."""


class AgentJudgeError(Exception):
    """Base exception for all agent judge errors."""


class JudgeError(AgentJudgeError):
    """Transport or provider failure while invoking the judge model."""


class JudgeResponseError(AgentJudgeError):
    """The judge returned a payload that violates the response contract."""

    def __init__(self, message: str, raw_excerpt: str = "") -> None:
        super().__init__(message)
        self.raw_excerpt = raw_excerpt


class BatchLengthMismatch(JudgeResponseError):
    """A batch response did not contain exactly one entry per proposition."""

    def __init__(self, expected: int, actual: int, raw_excerpt: str = "") -> None:
        super().__init__(
            f"Batch response count mismatch: expected {expected}, got {actual}",
            raw_excerpt,
        )
        self.expected = expected
        self.actual = actual


class CorrectionError(AgentJudgeError):
    """Error during direct correction of a message."""


class StorageError(AgentJudgeError):
    """Error reading from or writing to a log or run store."""


class ConfigurationError(AgentJudgeError):
    """Error in system configuration."""
