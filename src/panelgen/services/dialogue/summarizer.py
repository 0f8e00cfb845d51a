import re
from typing import Sequence

from ...models.dialogue import TranscriptLine

CONTEXT_MAX_CHARS = 400
SEPARATOR = " / "

# e.g. "... (근거: 매장 방문 경험)" or "... [source: survey]"
_EVIDENCE_TAIL = re.compile(r"\s*[\(\[（【][^()\[\]（）【】]*[\)\]）】]\s*$")


def strip_evidence(text: str) -> str:
    """Remove a trailing bracketed annotation from an utterance."""
    return _EVIDENCE_TAIL.sub("", text).strip()


def summarize(lines: Sequence[TranscriptLine], max_chars: int = CONTEXT_MAX_CHARS) -> str:
    """Digest of one round's participant lines, cut to ``max_chars``.

    The digest replaces the previous round's one rather than extending it.
    """
    parts = [
        f"{line.speaker}: {strip_evidence(line.text)}"
        for line in lines
        if not line.is_moderator
    ]
    return SEPARATOR.join(parts)[:max(max_chars, 0)]
