import logging
import re
from typing import List, Optional, Sequence

from ...models.dialogue import TranscriptLine
from ...models.prompt_style import PromptStyle
from .executor import RoundExecutor
from .prompts import build_insight_prompt

logger = logging.getLogger(__name__)

MAX_INSIGHTS = 8

_BULLET = re.compile(r"^\s*(?:[-*•·▪–]+|\d{1,2}[.)](?!\d))\s*")


def parse_insights(text: str, limit: int = MAX_INSIGHTS) -> List[str]:
    """One insight per non-empty line, bullet markers removed."""
    insights = []
    for line in (text or "").splitlines():
        line = _BULLET.sub("", line).strip()
        if line:
            insights.append(line)
    return insights[:limit]


class InsightExtractor:
    """Final pass that turns a finished transcript into actionable bullets."""

    def __init__(
        self,
        executor: RoundExecutor,
        style: Optional[PromptStyle] = None,
        max_insights: int = MAX_INSIGHTS,
        temperature: float = 0.4
    ):
        self.executor = executor
        self.style = style or PromptStyle()
        self.max_insights = max_insights
        self.temperature = temperature

    async def extract(self, transcript: Sequence[TranscriptLine], topic: str = "") -> List[str]:
        """Completion errors propagate; an empty transcript skips the call."""
        if not transcript:
            logger.info("Empty transcript, skipping insight extraction")
            return []

        prompt = build_insight_prompt(transcript, topic, self.style, self.max_insights)
        raw = await self.executor.execute(
            prompt.system_prompt,
            prompt.user_prompt,
            temperature=self.temperature
        )
        insights = parse_insights(raw, self.max_insights)
        if not insights:
            logger.warning("Insight pass returned no usable lines")
        return insights
