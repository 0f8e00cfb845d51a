"""Prompt construction for group rounds, solo answers and the insight pass."""

from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from ...models.dialogue import MODERATOR, ChatMessage, DialogueMode, TranscriptLine
from ...models.persona import Persona
from ...models.prompt_style import PromptStyle

QUESTION_MAX_CHARS = 300

STYLE_DIRECTIVES = {
    DialogueMode.DEFAULT: (
        "Focus on concrete customer-experience moments: finding the store, "
        "trying products, talking to staff, paying and leaving. Name specific "
        "touchpoints rather than general opinions."
    ),
    DialogueMode.EMOTION: (
        "Focus on feelings: what makes each person excited, anxious, bored or "
        "welcome, and the emotional triggers behind staying longer or leaving."
    ),
}

LANGUAGE_DIRECTIVES = {
    "ko": "Write every utterance in Korean.",
    "en": "Write every utterance in English.",
}


class RoundPrompt(BaseModel):
    """System/user message pair for one round."""
    model_config = ConfigDict(frozen=True)

    system_prompt: str
    user_prompt: str

    def messages(self) -> List[ChatMessage]:
        return [
            ChatMessage(role="system", content=self.system_prompt),
            ChatMessage(role="user", content=self.user_prompt),
        ]


def _bullets(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _guardrails(style: PromptStyle) -> str:
    if not style.anti_patterns:
        return ""
    return f"Guardrails:\n{_bullets(style.anti_patterns)}"


class RoundPromptBuilder:
    """Builds the prompt pair for a single group round."""

    def __init__(self, style: Optional[PromptStyle] = None):
        self.style = style or PromptStyle()

    def _format_rules(self, speaker_order: Sequence[str]) -> str:
        order = ", ".join(speaker_order)
        return f"""Output format (strict):
- Optional first line: "{MODERATOR}: <question for this round>"
- Then exactly one line per participant, in this order: {order}
- Every line is "<participant name>: <utterance>" using the exact name
- One line per participant, no headings, no narration, no blank commentary"""

    def _round_instruction(self, round_index: int, round_context: str) -> str:
        if round_index <= 1:
            return (
                "This is the opening round. The moderator introduces the topic "
                "for the first time. Nothing has been discussed yet, so do not "
                "mention previous or earlier rounds, or any prior discussion."
            )

        framing = self.style.framing_for_round(round_index)
        digest = round_context or "(no summary available)"
        if framing:
            question = (
                f"The moderator asks a new question framed around \"{framing}\". "
                "It must differ from the questions of earlier rounds."
            )
        else:
            question = (
                "The moderator asks a new question that goes deeper based on the "
                "prior summary instead of repeating earlier questions."
            )
        return f"""This is round {round_index}.
Summary of the previous round:
{digest}

{question}"""

    def build(
        self,
        topic: str,
        speaker_order: Sequence[str],
        round_index: int,
        round_context: str = "",
        participants: Sequence[Persona] = ()
    ) -> RoundPrompt:
        """Build the system/user prompts for ``round_index`` (1-based)."""
        cards = {p.name: p.card() for p in participants}
        roster = _bullets([cards.get(name, name) for name in speaker_order])
        language = self.style.resolve_language(topic)

        sections = [
            f"You are simulating a market-research focus group about: {topic}",
            STYLE_DIRECTIVES[self.style.style_mode],
            f"Participants:\n{roster}",
            self._round_instruction(round_index, round_context),
            "Each participant speaks in character, in one or two sentences, "
            "and may react to the others.",
            self._format_rules(speaker_order),
            _guardrails(self.style),
            LANGUAGE_DIRECTIVES[language],
        ]
        system_prompt = "\n\n".join(s for s in sections if s)

        user_prompt = (
            f"Topic: {topic}\n"
            f"Round {round_index}: write the {MODERATOR} line, then one line each for "
            f"{', '.join(speaker_order)}."
        )
        return RoundPrompt(system_prompt=system_prompt, user_prompt=user_prompt)


class SoloPromptBuilder:
    """Builds the message sequence for a single persona answering a question."""

    def __init__(self, style: Optional[PromptStyle] = None, question_max_chars: int = QUESTION_MAX_CHARS):
        self.style = style or PromptStyle()
        self.question_max_chars = question_max_chars

    def build(
        self,
        persona: Persona,
        question: str,
        history: Optional[Sequence[ChatMessage]] = None,
        mode: Optional[DialogueMode] = None,
        history_limit: int = 10
    ) -> List[ChatMessage]:
        question = question.strip()[:self.question_max_chars]
        mode = mode or self.style.style_mode
        language = self.style.resolve_language(question)

        sections = [
            f"You are {persona.card()}",
            "You are taking part in a market-research interview. Answer in the "
            "first person, as this person, in two to four sentences.",
            STYLE_DIRECTIVES[mode],
            _guardrails(self.style),
            LANGUAGE_DIRECTIVES[language],
        ]
        messages = [ChatMessage(role="system", content="\n\n".join(s for s in sections if s))]

        if history and history_limit > 0:
            prior = [m for m in history if m.role != "system"]
            messages.extend(prior[-history_limit:])

        messages.append(ChatMessage(role="user", content=question))
        return messages


def format_transcript(transcript: Sequence[TranscriptLine]) -> str:
    return "\n".join(f"[R{line.round}] {line.speaker}: {line.text}" for line in transcript)


def build_insight_prompt(
    transcript: Sequence[TranscriptLine],
    topic: str,
    style: PromptStyle,
    max_insights: int = 8
) -> RoundPrompt:
    """Single-shot prompt for the insight pass."""
    language = style.resolve_language(topic)
    kpis = ", ".join(style.kpi_defaults) if style.kpi_defaults else "the main business goals"
    system_prompt = "\n\n".join([
        "You are the moderator of a market-research focus group. The discussion "
        "is over and you now turn it into actionable insights.",
        f"Write between 3 and {max_insights} insights. Each insight is a single "
        "line starting with \"- \" and proposes a concrete on-site activation idea "
        f"tied to {kpis}.",
        "Output only the bullet lines.",
        LANGUAGE_DIRECTIVES[language],
    ])
    user_prompt = f"Topic: {topic}\n\nTranscript:\n{format_transcript(transcript)}"
    return RoundPrompt(system_prompt=system_prompt, user_prompt=user_prompt)
