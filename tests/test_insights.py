"""Tests for insight extraction."""

import pytest

from panelgen.errors import UpstreamError
from panelgen.models import TranscriptLine
from panelgen.services.dialogue.executor import RoundExecutor
from panelgen.services.dialogue.insights import InsightExtractor, parse_insights
from panelgen.services.llm import DemoCompletionClient


class TestParseInsights:
    """Tests for parse_insights."""

    def test_strips_bullets(self):
        """Bullet markers and numbering are removed."""
        text = "- first\n* second\n• third\n1. fourth\n2) fifth"
        assert parse_insights(text) == ["first", "second", "third", "fourth", "fifth"]

    def test_drops_empty_lines(self):
        """Blank lines and bare markers are dropped."""
        assert parse_insights("- a\n\n-   \n- b") == ["a", "b"]

    def test_caps_at_eight(self):
        """Never more than eight insights."""
        text = "\n".join(f"- idea {i}" for i in range(12))
        assert len(parse_insights(text)) == 8

    def test_keeps_decimal_numbers(self):
        """A leading decimal is not a list marker."""
        assert parse_insights("1.5x more seating") == ["1.5x more seating"]

    def test_empty(self):
        """Empty text gives no insights."""
        assert parse_insights("") == []


class TestInsightExtractor:
    """Tests for InsightExtractor."""

    @pytest.mark.asyncio
    async def test_empty_transcript_skips_call(self):
        """An empty transcript returns an empty list without calling the model."""
        client = DemoCompletionClient()
        extractor = InsightExtractor(RoundExecutor(client))
        assert await extractor.extract([]) == []
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_extracts(self):
        """Bullets from the reply become insights."""
        client = DemoCompletionClient(["- Add seating\n- Run demos\n- Offer coffee"])
        extractor = InsightExtractor(RoundExecutor(client))
        transcript = [TranscriptLine(speaker="Alice", text="tired", round=1)]
        assert await extractor.extract(transcript, "Dwell time") == ["Add seating", "Run demos", "Offer coffee"]

    @pytest.mark.asyncio
    async def test_blank_reply_is_empty_list(self):
        """A reply with nothing usable is not an error."""
        client = DemoCompletionClient(["\n  \n"])
        extractor = InsightExtractor(RoundExecutor(client))
        transcript = [TranscriptLine(speaker="Alice", text="tired", round=1)]
        assert await extractor.extract(transcript) == []

    @pytest.mark.asyncio
    async def test_failure_propagates(self):
        """Completion errors are not swallowed."""
        client = DemoCompletionClient()

        async def fail(*args, **kwargs):
            raise UpstreamError(503, "unavailable")

        client.complete = fail
        extractor = InsightExtractor(RoundExecutor(client))
        transcript = [TranscriptLine(speaker="Alice", text="tired", round=1)]
        with pytest.raises(UpstreamError):
            await extractor.extract(transcript)
