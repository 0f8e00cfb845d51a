"""Main CLI application entry point."""

import asyncio
import json
import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.prompt import Confirm

from ..config import SecureKeyManager, settings
from ..errors import PanelgenError, PersonaNotFoundError
from ..models.default_personas import DEFAULT_PERSONAS, get_available_panels, get_default_panel
from ..models.dialogue import DialogueMode, DialogueRequest, DialogueResult
from ..models.persona import Persona
from ..services.dialogue import DialogueOrchestrator
from ..storage import ChainPersonaStore, InMemoryPersonaStore, JSONPersonaStore
from .utils import create_insights_panel, create_persona_table, create_transcript_table

app = typer.Typer(help="Simulated market-research focus groups with LLM personas.")
personas_app = typer.Typer(help="Manage stored personas.")
app.add_typer(personas_app, name="personas")
console = Console()

logger = logging.getLogger(__name__)

def get_json_store() -> JSONPersonaStore:
    return JSONPersonaStore(settings.paths.get_path("data"))

def get_persona_store() -> ChainPersonaStore:
    """Stored personas first, then the built-in defaults."""
    return ChainPersonaStore(get_json_store(), InMemoryPersonaStore(DEFAULT_PERSONAS.values()))

def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}")
    raise typer.Exit(1)

@app.callback()
def main(debug: bool = typer.Option(False, help="Enable debug logging")):
    settings.setup_logging(debug)

async def _run_group(
    topic: str,
    persona_ids: List[str],
    panel: str,
    rounds: int,
    mode: DialogueMode,
    demo: bool
) -> DialogueResult:
    store = get_persona_store()
    async with settings.get_completion_client(force_demo=demo) as client:
        orchestrator = DialogueOrchestrator.from_settings(settings, client, store)
        if persona_ids:
            participants = await orchestrator.resolve_participants(persona_ids)
        else:
            participants = get_default_panel(panel)
        request = DialogueRequest(
            topic=topic,
            participants=participants,
            round_count=rounds,
            mode=mode
        )
        return await orchestrator.run_group_dialogue(request)

@app.command()
def group(
    topic: str = typer.Argument(..., help="Discussion topic"),
    persona: Optional[List[str]] = typer.Option(None, "--persona", "-p", help="Persona id, repeat for each participant"),
    panel: str = typer.Option("mixed", help=f"Default panel when no --persona is given ({', '.join(get_available_panels())})"),
    rounds: int = typer.Option(2, help="Number of rounds, clamped to 1-5"),
    mode: DialogueMode = typer.Option(DialogueMode.DEFAULT, help="Prompt style"),
    demo: bool = typer.Option(False, help="Use offline demo responses"),
    save: bool = typer.Option(False, help="Save the result as JSON in the output directory"),
):
    """Run a multi-round group discussion."""
    if panel not in get_available_panels():
        _fail(f"Unknown panel: {panel} (choose from {', '.join(get_available_panels())})")
    try:
        result = asyncio.run(_run_group(topic, persona or [], panel, rounds, mode, demo))
    except PanelgenError as e:
        logger.error(f"Group dialogue failed: {e}")
        _fail(str(e))

    console.print(create_transcript_table(result))
    console.print(create_insights_panel(result.insights))

    if save:
        path = settings.paths.get_unique_output_path("group")
        settings.paths.save_json(path, result.model_dump(mode="json"))
        console.print(f"[green]Saved result to {path}")

async def _run_solo(persona_id: str, question: str, mode: DialogueMode, demo: bool) -> str:
    store = get_persona_store()
    async with settings.get_completion_client(force_demo=demo) as client:
        orchestrator = DialogueOrchestrator.from_settings(settings, client, store)
        return await orchestrator.run_solo_answer(persona_id, question, mode=mode)

@app.command()
def ask(
    persona_id: str = typer.Argument(..., help="Persona id"),
    question: str = typer.Argument(..., help="Question for the persona"),
    mode: DialogueMode = typer.Option(DialogueMode.DEFAULT, help="Prompt style"),
    demo: bool = typer.Option(False, help="Use offline demo responses"),
):
    """Ask a single persona one question."""
    try:
        answer = asyncio.run(_run_solo(persona_id, question, mode, demo))
    except PanelgenError as e:
        logger.error(f"Solo answer failed: {e}")
        _fail(str(e))
    console.print(answer)

@app.command()
def keys():
    """Store the OpenAI API key in the system keyring."""
    if settings.get_openai_api_key():
        console.print("OpenAI API key is already configured.")
        if not Confirm.ask("Do you want to replace it?"):
            return
    if SecureKeyManager.prompt_for_key(settings.openai_api_key_ref):
        console.print("[green]API key stored")
    else:
        console.print("[yellow]No key entered")

@personas_app.command("list")
def list_personas(
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON"),
):
    """List stored and built-in personas."""
    personas = asyncio.run(get_persona_store().list())
    if as_json:
        console.print_json(json.dumps([p.model_dump() for p in personas], ensure_ascii=False))
    else:
        console.print(create_persona_table(personas))

@personas_app.command("add")
def add_persona(
    persona_id: str = typer.Option(..., "--id", help="Unique persona id"),
    name: str = typer.Option(..., prompt=True),
    role: str = typer.Option("", prompt=True, help="Device or segment label"),
    traits: str = typer.Option("", prompt=True, help="Comma separated trait tags"),
    bio: str = typer.Option("", prompt=True, help="Background"),
):
    """Create or replace a stored persona."""
    persona = Persona(id=persona_id, name=name, role=role, traits=traits, bio=bio)
    asyncio.run(get_json_store().save(persona))
    console.print(f"[green]Saved persona: {persona_id}")

@personas_app.command("remove")
def remove_persona(persona_id: str = typer.Argument(..., help="Persona id")):
    """Delete a stored persona."""
    if asyncio.run(get_json_store().delete(persona_id)):
        console.print(f"[green]Deleted persona: {persona_id}")
    else:
        _fail(str(PersonaNotFoundError(persona_id)))

if __name__ == "__main__":
    app()
