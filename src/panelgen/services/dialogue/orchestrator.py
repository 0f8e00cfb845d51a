from typing import List, Optional, Sequence, Tuple, Union
import logging

from ...errors import (
    CompletionError,
    DuplicateSpeakerError,
    EmptyQuestionError,
    InvalidTopicError,
    PersonaNotFoundError,
    TooFewParticipantsError,
    UpstreamFailure,
)
from ...models.dialogue import (
    MIN_PARTICIPANTS,
    ChatMessage,
    DialogueMode,
    DialogueRequest,
    DialogueResult,
    TranscriptLine,
)
from ...models.persona import Persona
from ...models.prompt_style import PromptStyle
from ...storage.base import PersonaStore
from ..llm.base import CompletionClient
from .executor import DEFAULT_DEADLINE, RoundExecutor
from .insights import MAX_INSIGHTS, InsightExtractor
from .parser import MODERATOR_LABELS, parse_round
from .prompts import QUESTION_MAX_CHARS, RoundPromptBuilder, SoloPromptBuilder
from .summarizer import CONTEXT_MAX_CHARS, summarize

logger = logging.getLogger(__name__)

class DialogueOrchestrator:
    """Runs solo answers and multi-round group discussions."""

    def __init__(
        self,
        client: CompletionClient,
        persona_store: Optional[PersonaStore] = None,
        style: Optional[PromptStyle] = None,
        temperature: float = 0.8,
        round_timeout: float = DEFAULT_DEADLINE,
        context_max_chars: int = CONTEXT_MAX_CHARS,
        max_insights: int = MAX_INSIGHTS,
        question_max_chars: int = QUESTION_MAX_CHARS,
        history_limit: int = 10
    ):
        self.client = client
        self.persona_store = persona_store
        self.style = style or PromptStyle()
        self.temperature = temperature
        self.context_max_chars = context_max_chars
        self.max_insights = max_insights
        self.question_max_chars = question_max_chars
        self.history_limit = history_limit
        self.executor = RoundExecutor(client, deadline=round_timeout)

    @classmethod
    def from_settings(
        cls,
        settings,
        client: CompletionClient,
        persona_store: Optional[PersonaStore] = None
    ) -> 'DialogueOrchestrator':
        return cls(
            client=client,
            persona_store=persona_store,
            style=settings.prompt_style(),
            temperature=settings.llm_temperature,
            round_timeout=settings.round_timeout,
            context_max_chars=settings.context_max_chars,
            max_insights=settings.max_insights,
            question_max_chars=settings.question_max_chars,
            history_limit=settings.history_limit,
        )

    async def resolve_persona(self, persona: Union[Persona, str]) -> Persona:
        if isinstance(persona, Persona):
            return persona
        found = await self.persona_store.get(persona) if self.persona_store else None
        if found is None:
            raise PersonaNotFoundError(persona)
        return found

    async def resolve_participants(self, persona_ids: Sequence[str]) -> List[Persona]:
        return [await self.resolve_persona(persona_id) for persona_id in persona_ids]

    @staticmethod
    def validate_request(request: DialogueRequest) -> Tuple[str, ...]:
        """Check a request and return its speaker order."""
        if not request.topic:
            raise InvalidTopicError("Topic must not be empty")
        if len(request.participants) < MIN_PARTICIPANTS:
            raise TooFewParticipantsError(
                f"A group dialogue needs at least {MIN_PARTICIPANTS} participants, "
                f"got {len(request.participants)}"
            )

        speaker_order = request.speaker_order
        if len(set(speaker_order)) != len(speaker_order):
            raise DuplicateSpeakerError(f"Participant names must be unique: {', '.join(speaker_order)}")
        reserved = {label.casefold() for label in MODERATOR_LABELS}
        clashes = [name for name in speaker_order if name.strip().casefold() in reserved]
        if clashes:
            raise DuplicateSpeakerError(f"Participant name reserved for the moderator: {clashes[0]}")
        return speaker_order

    async def run_round(
        self,
        builder: RoundPromptBuilder,
        request: DialogueRequest,
        speaker_order: Tuple[str, ...],
        round_index: int,
        round_context: str,
        language: str
    ) -> List[TranscriptLine]:
        prompt = builder.build(
            request.topic,
            speaker_order,
            round_index,
            round_context,
            participants=request.participants
        )
        try:
            raw = await self.executor.execute(
                prompt.system_prompt,
                prompt.user_prompt,
                temperature=self.temperature
            )
        except CompletionError as e:
            raise UpstreamFailure(e, stage=f"round {round_index}") from e

        framing = builder.style.framing_for_round(round_index)
        return parse_round(raw, speaker_order, round_index, framing=framing, language=language)

    async def run_group_dialogue(self, request: DialogueRequest) -> DialogueResult:
        """Run every round in order, then the insight pass.

        Either returns a complete result or raises; no partial transcript
        is ever returned.
        """
        speaker_order = self.validate_request(request)
        style = self.style.with_mode(request.mode)
        builder = RoundPromptBuilder(style)
        language = style.resolve_language(request.topic)

        logger.info(
            f"Starting group dialogue: {len(speaker_order)} participants, "
            f"{request.round_count} rounds, mode={request.mode.value}"
        )

        transcript: List[TranscriptLine] = []
        round_context = ""
        for round_index in range(1, request.round_count + 1):
            lines = await self.run_round(
                builder, request, speaker_order, round_index, round_context, language
            )
            transcript.extend(lines)
            round_context = summarize(lines, self.context_max_chars)
            logger.info(f"Round {round_index} complete: {len(lines)} lines")

        extractor = InsightExtractor(self.executor, style, self.max_insights)
        try:
            insights = await extractor.extract(transcript, request.topic)
        except CompletionError as e:
            raise UpstreamFailure(e, stage="insight extraction") from e

        logger.info(f"Group dialogue finished: {len(transcript)} lines, {len(insights)} insights")
        return DialogueResult(
            topic=request.topic,
            mode=request.mode,
            transcript=tuple(transcript),
            insights=tuple(insights),
        )

    async def run_solo_answer(
        self,
        persona: Union[Persona, str],
        question: str,
        history: Optional[Sequence[ChatMessage]] = None,
        mode: DialogueMode = DialogueMode.DEFAULT
    ) -> str:
        """Answer a single question in the voice of one persona."""
        if not question or not question.strip():
            raise EmptyQuestionError("Question must not be empty")
        persona = await self.resolve_persona(persona)

        builder = SoloPromptBuilder(self.style, self.question_max_chars)
        messages = builder.build(persona, question, history, mode, self.history_limit)
        try:
            answer = await self.executor.complete(messages, temperature=self.temperature)
        except CompletionError as e:
            raise UpstreamFailure(e, stage="solo answer") from e

        logger.info(f"Solo answer from {persona.name}: {len(answer)} characters")
        return answer
