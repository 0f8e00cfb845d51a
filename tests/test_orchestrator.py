"""Tests for the dialogue orchestrator."""

import pytest

from panelgen.errors import (
    DuplicateSpeakerError,
    EmptyQuestionError,
    InvalidTopicError,
    PersonaNotFoundError,
    TooFewParticipantsError,
    UpstreamError,
    UpstreamFailure,
)
from panelgen.models import MODERATOR, ChatMessage, DialogueMode, DialogueRequest, Persona, PromptStyle
from panelgen.services.dialogue import DialogueOrchestrator
from panelgen.services.llm import DemoCompletionClient

ROUND_ONE = (
    "모더레이터: 오늘 주제는 매장 체류 시간 개선입니다.\n"
    "Alice: 체험 공간이 더 넓으면 좋겠어요.\n"
    "Bob: 가격 비교 정보가 있으면 오래 머물 것 같아요.\n"
    "Carol: 사진 찍기 좋은 공간이 필요해요."
)
ROUND_TWO = (
    "모더레이터: 구체적으로 어떤 장치가 필요할까요?\n"
    "Alice: 신제품 데모 예약 시스템이요.\n"
    "Bob: 앉아서 비교할 수 있는 테이블이요."
)
INSIGHTS = "- 체험 존 확대\n- 가격 비교 키오스크 설치\n- 포토 스팟 운영\n- 데모 예약제 도입"


class TestGroupDialogue:
    """Tests for run_group_dialogue."""

    @pytest.mark.asyncio
    async def test_end_to_end(self, participants):
        """Two rounds with a missing speaker in round two."""
        client = DemoCompletionClient([ROUND_ONE, ROUND_TWO, INSIGHTS])
        orchestrator = DialogueOrchestrator(client)
        request = DialogueRequest(topic="체류 시간 개선", participants=participants, round_count=2)

        result = await orchestrator.run_group_dialogue(request)

        assert [l.speaker for l in result.round_lines(1)] == [MODERATOR, "Alice", "Bob", "Carol"]
        assert [l.speaker for l in result.round_lines(2)] == [MODERATOR, "Alice", "Bob"]
        assert len(result.transcript) == 7
        assert 3 <= len(result.insights) <= 8
        assert result.insights[0] == "체험 존 확대"
        assert len(client.calls) == 3

    @pytest.mark.asyncio
    async def test_digest_feeds_next_round(self, participants):
        """Round two's prompt carries round one's digest, not round one's moderator."""
        client = DemoCompletionClient([ROUND_ONE, ROUND_TWO, INSIGHTS])
        orchestrator = DialogueOrchestrator(client, context_max_chars=400)
        request = DialogueRequest(topic="체류 시간 개선", participants=participants, round_count=2)

        await orchestrator.run_group_dialogue(request)

        second_system = client.calls[1][0].content
        assert "Alice: 체험 공간이 더 넓으면 좋겠어요." in second_system
        assert "오늘 주제는" not in second_system

    @pytest.mark.asyncio
    async def test_digest_replaces_previous(self, participants):
        """Round three sees round two's digest only, never round one's."""
        round_one = "Moderator: m1\nAlice: ROUNDONE alpha\nBob: ROUNDONE beta\nCarol: ROUNDONE gamma"
        round_two = "Moderator: m2\nAlice: ROUNDTWO alpha\nBob: ROUNDTWO beta\nCarol: ROUNDTWO gamma"
        round_three = "Moderator: m3\nAlice: a3\nBob: b3\nCarol: c3"
        client = DemoCompletionClient([round_one, round_two, round_three, "- x\n- y\n- z"])
        orchestrator = DialogueOrchestrator(client, context_max_chars=400)
        request = DialogueRequest(topic="Dwell time", participants=participants, round_count=3)

        await orchestrator.run_group_dialogue(request)

        third_prompt = "\n".join(m.content for m in client.calls[2])
        assert "ROUNDTWO" in third_prompt
        assert "ROUNDONE" not in third_prompt

    @pytest.mark.asyncio
    async def test_line_bounds(self, participants):
        """At most R moderator lines and R*N speaker lines."""
        noisy = "\n".join(["Alice: a", "Bob: b", "Carol: c", "Moderator: m"] * 3)
        rounds = 3
        client = DemoCompletionClient([noisy] * rounds + ["- x\n- y\n- z"])
        orchestrator = DialogueOrchestrator(client)
        request = DialogueRequest(topic="Dwell time", participants=participants, round_count=rounds)

        result = await orchestrator.run_group_dialogue(request)

        moderator_lines = [l for l in result.transcript if l.is_moderator]
        speaker_lines = [l for l in result.transcript if not l.is_moderator]
        assert len(moderator_lines) <= rounds
        assert len(speaker_lines) <= rounds * len(participants)
        for round_index in range(1, rounds + 1):
            names = result.speakers_in_round(round_index)
            assert len(names) == len(set(names))

    @pytest.mark.asyncio
    async def test_unparseable_replies_degrade(self, participants):
        """Replies with no usable lines still complete the run."""
        client = DemoCompletionClient(["Sorry, I can't.", "Still no.", ""])
        orchestrator = DialogueOrchestrator(client)
        request = DialogueRequest(topic="Dwell time", participants=participants, round_count=2)

        result = await orchestrator.run_group_dialogue(request)

        assert [l.speaker for l in result.transcript] == [MODERATOR, MODERATOR]
        assert result.insights == ()

    @pytest.mark.asyncio
    async def test_timeout_in_round_two_aborts(self, participants, slow_client):
        """A timeout aborts the run with no partial result."""
        client = slow_client([ROUND_ONE, ROUND_TWO], fast_calls=1, delay=5.0)
        orchestrator = DialogueOrchestrator(client, round_timeout=0.05)
        request = DialogueRequest(topic="체류 시간 개선", participants=participants, round_count=2)

        with pytest.raises(UpstreamFailure) as exc_info:
            await orchestrator.run_group_dialogue(request)

        assert exc_info.value.reason == "timeout"
        assert exc_info.value.stage == "round 2"
        assert client.calls == 2

    @pytest.mark.asyncio
    async def test_insight_failure_surfaces(self, participants):
        """A failing insight pass fails the run."""
        replies = [ROUND_ONE]

        async def complete(messages, temperature=0.7, timeout=None):
            if replies:
                return replies.pop(0)
            raise UpstreamError(500, "boom")

        client = DemoCompletionClient()
        client.complete = complete
        orchestrator = DialogueOrchestrator(client)
        request = DialogueRequest(topic="Dwell time", participants=participants, round_count=1)

        with pytest.raises(UpstreamFailure) as exc_info:
            await orchestrator.run_group_dialogue(request)
        assert exc_info.value.reason == "http 500"
        assert exc_info.value.stage == "insight extraction"

    @pytest.mark.asyncio
    async def test_emotion_mode_reaches_prompt(self, participants):
        """The request mode selects the prompt style."""
        client = DemoCompletionClient(["Alice: a", "- x"])
        orchestrator = DialogueOrchestrator(client)
        request = DialogueRequest(
            topic="Dwell time", participants=participants, round_count=1, mode=DialogueMode.EMOTION
        )
        result = await orchestrator.run_group_dialogue(request)
        assert "Focus on feelings" in client.calls[0][0].content
        assert result.mode == DialogueMode.EMOTION

    @pytest.mark.asyncio
    async def test_framing_used_for_synthesized_moderator(self, participants):
        """A missing round-two moderator line uses the framing label."""
        client = DemoCompletionClient(["Alice: a", "Alice: b", "- x"])
        style = PromptStyle(round_framings=["Price and value"])
        orchestrator = DialogueOrchestrator(client, style=style)
        request = DialogueRequest(topic="Dwell time", participants=participants, round_count=2)

        result = await orchestrator.run_group_dialogue(request)

        assert "Price and value" in result.round_lines(2)[0].text


class TestValidation:
    """Validation happens before any upstream call."""

    @pytest.mark.asyncio
    async def test_empty_topic(self, participants, demo_client):
        request = DialogueRequest(topic="   ", participants=participants)
        with pytest.raises(InvalidTopicError):
            await DialogueOrchestrator(demo_client).run_group_dialogue(request)
        assert demo_client.calls == []

    @pytest.mark.asyncio
    async def test_too_few_participants(self, alice, demo_client):
        request = DialogueRequest(topic="Dwell time", participants=[alice, alice])
        with pytest.raises(TooFewParticipantsError):
            await DialogueOrchestrator(demo_client).run_group_dialogue(request)
        assert demo_client.calls == []

    @pytest.mark.asyncio
    async def test_duplicate_names(self, alice, demo_client):
        other = Persona(id="p-other", name="Alice")
        request = DialogueRequest(topic="Dwell time", participants=[alice, other])
        with pytest.raises(DuplicateSpeakerError):
            await DialogueOrchestrator(demo_client).run_group_dialogue(request)

    @pytest.mark.asyncio
    async def test_moderator_name_reserved(self, alice, demo_client):
        other = Persona(id="p-mod", name="Moderator")
        request = DialogueRequest(topic="Dwell time", participants=[alice, other])
        with pytest.raises(DuplicateSpeakerError):
            await DialogueOrchestrator(demo_client).run_group_dialogue(request)


class TestSoloAnswer:
    """Tests for run_solo_answer."""

    @pytest.mark.asyncio
    async def test_by_id(self, persona_store):
        """Personas are looked up by id and the text is returned as is."""
        client = DemoCompletionClient(["I stay when there are chairs."])
        orchestrator = DialogueOrchestrator(client, persona_store=persona_store)
        answer = await orchestrator.run_solo_answer("p-bob", "What keeps you in a store?")
        assert answer == "I stay when there are chairs."
        assert "You are Bob" in client.calls[0][0].content

    @pytest.mark.asyncio
    async def test_with_history(self, alice):
        """History sits between the system message and the question."""
        client = DemoCompletionClient(["ok"])
        orchestrator = DialogueOrchestrator(client, history_limit=1)
        history = [ChatMessage(role="user", content="old"), ChatMessage(role="assistant", content="reply")]
        await orchestrator.run_solo_answer(alice, "new?", history)
        assert [m.content for m in client.calls[0][1:]] == ["reply", "new?"]

    @pytest.mark.asyncio
    async def test_unknown_persona(self, persona_store, demo_client):
        orchestrator = DialogueOrchestrator(demo_client, persona_store=persona_store)
        with pytest.raises(PersonaNotFoundError):
            await orchestrator.run_solo_answer("nobody", "hi")

    @pytest.mark.asyncio
    async def test_no_store(self, demo_client):
        """Lookups by id without a store fail as not found."""
        with pytest.raises(PersonaNotFoundError):
            await DialogueOrchestrator(demo_client).run_solo_answer("p-alice", "hi")

    @pytest.mark.asyncio
    async def test_empty_question(self, alice, demo_client):
        with pytest.raises(EmptyQuestionError):
            await DialogueOrchestrator(demo_client).run_solo_answer(alice, "  ")
        assert demo_client.calls == []

    @pytest.mark.asyncio
    async def test_upstream_failure(self, alice, slow_client):
        client = slow_client(["never"], fast_calls=0)
        orchestrator = DialogueOrchestrator(client, round_timeout=0.05)
        with pytest.raises(UpstreamFailure) as exc_info:
            await orchestrator.run_solo_answer(alice, "hi")
        assert exc_info.value.reason == "timeout"

    @pytest.mark.asyncio
    async def test_demo_echo(self, alice, demo_client):
        """With no scripted reply the demo client echoes the question."""
        answer = await DialogueOrchestrator(demo_client).run_solo_answer(alice, "안녕하세요?")
        assert answer == "DEMO 응답: 안녕하세요?"
