"""Turns free-text round replies into transcript lines.

Parsing happens in two stages. ``scan_lines`` tags every ``label: text``
line that belongs to the moderator or a known speaker. ``select_round_lines``
then reduces the tagged lines to at most one line per speaker (first wins),
puts the moderator first, and synthesizes a moderator line when none
survived. Neither stage raises.
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from ...models.dialogue import MODERATOR, TranscriptLine

logger = logging.getLogger(__name__)

MODERATOR_LABELS = ("moderator", "모더레이터", "사회자")
LABEL_MAX_CHARS = 50

LINE_PATTERN = re.compile(r"^([^:]{1,%d}):(.*)$" % LABEL_MAX_CHARS)
_LABEL_NOISE = re.compile(r"^[\s\-*•#>]+|[\s*]+$")

_CLAUSE_END = ",，.!?。\n"
_PRIOR_REFERENCES = [
    r"\b(?:previous|prior|earlier|last|past)\s+(?:rounds?|discussions?|sessions?|conversations?|talks?)\b",
    r"\bas\s+(?:\w+\s+)?(?:discussed|mentioned|said|noted)\s+(?:earlier|before|previously)\b",
    r"\b(?:earlier|previously)\s+(?:in|during)\s+(?:the|our|this)\s+(?:discussion|conversation|session)\b",
    r"\b(?:previously|last\s+time)\b",
    # "Before, ..." only at the start of a clause
    r"(?:^|(?<=[{end}]))\s*before\s*[,，]".format(end=_CLAUSE_END),
    r"(?:이전|지난|앞선|앞의|저번)\s*(?:라운드|논의|토론|대화|세션)",
    r"앞서\s*(?:논의|말씀|이야기|언급|나눈)",
    r"지난\s*시간",
    r"전에\s*(?:말씀|이야기)",
    r"지난번",
]
_PRIOR_CLAUSE = re.compile(
    r"[^{end}]*?(?:{refs})[^{end}]*[{end}]?\s*".format(
        end=_CLAUSE_END, refs="|".join(_PRIOR_REFERENCES)
    ),
    re.IGNORECASE,
)
_SPACES = re.compile(r"\s{2,}")

OPENING_LINES = {
    "ko": "오늘 주제를 소개하고, 각자의 첫인상부터 들어보겠습니다.",
    "en": "Let's introduce today's topic and start with everyone's first impressions.",
}
FRAMED_LINES = {
    "ko": "이번에는 '{framing}' 관점에서 이야기해 보겠습니다.",
    "en": "Let's look at this from a new angle: {framing}.",
}
DEEPEN_LINES = {
    "ko": "지금까지의 논의를 바탕으로 한 단계 더 깊이 들어가 보겠습니다.",
    "en": "Let's go deeper based on the prior discussion.",
}

Candidate = Tuple[str, str]


def sanitize_opening(text: str) -> str:
    """Strip clauses that refer to earlier rounds or discussion.

    Applied until nothing changes, so the result is a fixed point and a
    second call returns it unchanged.
    """
    current = text or ""
    while True:
        cleaned = _PRIOR_CLAUSE.sub(" ", current)
        cleaned = _SPACES.sub(" ", cleaned).strip(" ,，")
        if cleaned == current:
            return cleaned
        current = cleaned


def _normalize_label(label: str) -> str:
    return _LABEL_NOISE.sub("", label)


def classify_label(
    label: str,
    speaker_order: Sequence[str],
    moderator_labels: Sequence[str] = MODERATOR_LABELS
) -> Optional[str]:
    """Map a line label to MODERATOR, a speaker name, or None."""
    label = _normalize_label(label)
    if not label:
        return None
    if label.casefold() in {m.casefold() for m in moderator_labels}:
        return MODERATOR
    if label in speaker_order:
        return label
    return None


def scan_lines(
    raw_text: str,
    speaker_order: Sequence[str],
    moderator_labels: Sequence[str] = MODERATOR_LABELS
) -> List[Candidate]:
    """Tag each usable line of the reply as (speaker, text)."""
    candidates = []
    discarded = 0
    for line in (raw_text or "").splitlines():
        line = line.strip()
        if not line:
            continue
        match = LINE_PATTERN.match(line)
        if not match:
            discarded += 1
            continue
        speaker = classify_label(match.group(1), speaker_order, moderator_labels)
        text = match.group(2).strip().lstrip("*").strip()
        if speaker is None or not text:
            discarded += 1
            continue
        candidates.append((speaker, text))

    if discarded:
        logger.debug(f"Discarded {discarded} unattributed lines")
    return candidates


def synthesize_moderator_line(
    round_index: int,
    framing: Optional[str] = None,
    language: str = "en"
) -> str:
    language = language if language in OPENING_LINES else "en"
    if round_index <= 1:
        return OPENING_LINES[language]
    if framing:
        return FRAMED_LINES[language].format(framing=framing)
    return DEEPEN_LINES[language]


def select_round_lines(
    candidates: Sequence[Candidate],
    speaker_order: Sequence[str],
    round_index: int,
    framing: Optional[str] = None,
    language: str = "en"
) -> List[TranscriptLine]:
    """Reduce tagged lines to the ordered lines of one round."""
    first_seen = {}
    for speaker, text in candidates:
        if speaker == MODERATOR and round_index == 1:
            text = sanitize_opening(text)
            if not text:
                continue
        first_seen.setdefault(speaker, text)

    moderator_text = first_seen.get(MODERATOR)
    if moderator_text is None:
        moderator_text = synthesize_moderator_line(round_index, framing, language)
        logger.info(f"Round {round_index}: no moderator line, synthesized one")

    lines = [TranscriptLine(speaker=MODERATOR, text=moderator_text, round=round_index)]
    missing = []
    for name in speaker_order:
        if name in first_seen:
            lines.append(TranscriptLine(speaker=name, text=first_seen[name], round=round_index))
        else:
            missing.append(name)

    if missing:
        logger.warning(f"Round {round_index}: no line from {', '.join(missing)}")
    return lines


def parse_round(
    raw_text: str,
    speaker_order: Sequence[str],
    round_index: int,
    framing: Optional[str] = None,
    language: str = "en",
    moderator_labels: Sequence[str] = MODERATOR_LABELS
) -> List[TranscriptLine]:
    """Parse and repair one round's reply. Never raises."""
    candidates = scan_lines(raw_text, speaker_order, moderator_labels)
    return select_round_lines(candidates, speaker_order, round_index, framing, language)
