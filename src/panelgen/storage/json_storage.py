import json
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..models.persona import Persona
from .base import PersonaStore

logger = logging.getLogger(__name__)

class JSONPersonaStore(PersonaStore):
    """Personas kept in a single JSON file keyed by id."""

    def __init__(self, data_dir: Path):
        self.data_dir = data_dir
        self.personas_file = data_dir / "personas.json"
        self.lock = asyncio.Lock()

        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self.personas_file.exists():
            self.personas_file.write_text("{}")

    async def _read_json(self) -> Dict[str, Any]:
        async with self.lock:
            try:
                data = json.loads(self.personas_file.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                logger.error(f"Corrupt persona file {self.personas_file}: {e}")
                return {}
        return data if isinstance(data, dict) else {}

    async def _write_json(self, data: Dict[str, Any]) -> None:
        async with self.lock:
            self.personas_file.write_text(
                json.dumps(data, indent=2, ensure_ascii=False),
                encoding="utf-8"
            )

    @staticmethod
    def _load(persona_id: str, record: Any) -> Optional[Persona]:
        try:
            return Persona.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Skipping invalid persona record {persona_id}: {e}")
            return None

    async def get(self, persona_id: str) -> Optional[Persona]:
        data = await self._read_json()
        if persona_id in data:
            return self._load(persona_id, data[persona_id])
        return None

    async def list(self) -> List[Persona]:
        data = await self._read_json()
        personas = (self._load(key, record) for key, record in data.items())
        return [p for p in personas if p is not None]

    async def save(self, persona: Persona) -> None:
        data = await self._read_json()
        data[persona.id] = persona.model_dump()
        await self._write_json(data)

    async def delete(self, persona_id: str) -> bool:
        data = await self._read_json()
        if persona_id in data:
            del data[persona_id]
            await self._write_json(data)
            return True
        return False
