"""Persona storage for panelgen."""

from .base import ChainPersonaStore, InMemoryPersonaStore, PersonaStore
from .json_storage import JSONPersonaStore

__all__ = ['PersonaStore', 'ChainPersonaStore', 'InMemoryPersonaStore', 'JSONPersonaStore']
