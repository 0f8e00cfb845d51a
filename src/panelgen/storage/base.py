from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from ..models.persona import Persona

class PersonaStore(ABC):
    """Read contract the dialogue core depends on."""

    @abstractmethod
    async def get(self, persona_id: str) -> Optional[Persona]:
        pass

    @abstractmethod
    async def list(self) -> List[Persona]:
        pass


class InMemoryPersonaStore(PersonaStore):
    """Read-only store over a fixed set of personas."""

    def __init__(self, personas: Iterable[Persona] = ()):
        self._personas = {p.id: p for p in personas}

    async def get(self, persona_id: str) -> Optional[Persona]:
        return self._personas.get(persona_id)

    async def list(self) -> List[Persona]:
        return list(self._personas.values())


class ChainPersonaStore(PersonaStore):
    """Looks personas up in several stores; earlier stores win."""

    def __init__(self, *stores: PersonaStore):
        self.stores = stores

    async def get(self, persona_id: str) -> Optional[Persona]:
        for store in self.stores:
            persona = await store.get(persona_id)
            if persona is not None:
                return persona
        return None

    async def list(self) -> List[Persona]:
        merged = {}
        for store in self.stores:
            for persona in await store.list():
                merged.setdefault(persona.id, persona)
        return list(merged.values())
