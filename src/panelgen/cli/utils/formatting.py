"""CLI output formatting utilities."""

from typing import List, Sequence

from rich.panel import Panel
from rich.table import Table

from ...models.dialogue import DialogueResult
from ...models.persona import Persona

def truncate_text(text: str, limit: int = 60) -> str:
    """Shorten text for table cells."""
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."

def create_persona_table(personas: Sequence[Persona], title: str = "Personas") -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Role")
    table.add_column("Traits")
    table.add_column("Bio")
    for persona in personas:
        table.add_row(
            persona.id,
            persona.name,
            persona.role,
            persona.traits,
            truncate_text(persona.bio)
        )
    return table

def create_transcript_table(result: DialogueResult) -> Table:
    """Transcript grouped by round, moderator lines highlighted."""
    table = Table(title=f"Focus group: {result.topic}", show_lines=False)
    table.add_column("Round", justify="right", style="cyan")
    table.add_column("Speaker", style="bold")
    table.add_column("Utterance")
    for line in result.transcript:
        speaker = f"[magenta]{line.speaker}[/magenta]" if line.is_moderator else line.speaker
        table.add_row(str(line.round), speaker, line.text)
    return table

def create_insights_panel(insights: Sequence[str]) -> Panel:
    if not insights:
        return Panel("[yellow]No insights were produced[/yellow]", title="Insights")
    body: List[str] = [f"{i}. {insight}" for i, insight in enumerate(insights, 1)]
    return Panel("\n".join(body), title="Insights", border_style="green")
