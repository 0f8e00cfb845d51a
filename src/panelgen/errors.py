"""Exception types raised by panelgen."""

from typing import Optional

MAX_ERROR_BODY = 500


def truncate_body(body: Optional[str], limit: int = MAX_ERROR_BODY) -> str:
    """Trim an upstream error payload before it is logged or stored."""
    if not body:
        return ""
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


class PanelgenError(Exception):
    """Base class for all panelgen errors."""


class DialogueValidationError(PanelgenError):
    """Request rejected before any upstream call."""


class InvalidTopicError(DialogueValidationError):
    pass


class TooFewParticipantsError(DialogueValidationError):
    pass


class DuplicateSpeakerError(DialogueValidationError):
    pass


class EmptyQuestionError(DialogueValidationError):
    pass


class PersonaNotFoundError(DialogueValidationError):
    def __init__(self, persona_id: str):
        super().__init__(f"Persona not found: {persona_id}")
        self.persona_id = persona_id


class CompletionError(PanelgenError):
    """A completion call failed."""

    reason = "error"


class CompletionTimeout(CompletionError):
    reason = "timeout"

    def __init__(self, deadline: float):
        super().__init__(f"Completion did not finish within {deadline:.1f}s")
        self.deadline = deadline


class UpstreamError(CompletionError):
    """Non-2xx reply or network failure from the provider.

    ``status_code`` is None when no HTTP response was received.
    """

    def __init__(self, status_code: Optional[int], body: Optional[str] = None):
        self.status_code = status_code
        self.body = truncate_body(body)
        if status_code is None:
            message = f"Upstream request failed: {self.body}"
        else:
            message = f"Upstream returned HTTP {status_code}: {self.body}"
        super().__init__(message)

    @property
    def reason(self) -> str:
        if self.status_code is None:
            return "network"
        return f"http {self.status_code}"


class UpstreamMalformed(CompletionError):
    """Provider answered 2xx but the payload had no usable text."""

    reason = "malformed"


class UpstreamFailure(PanelgenError):
    """A dialogue or solo run aborted because a completion call failed."""

    def __init__(self, cause: CompletionError, stage: str = ""):
        self.cause = cause
        self.reason = cause.reason
        self.stage = stage
        where = f" during {stage}" if stage else ""
        super().__init__(f"Upstream failure{where} ({self.reason}): {cause}")
