"""CLI utility functions."""

from .formatting import (
    create_insights_panel,
    create_persona_table,
    create_transcript_table,
    truncate_text,
)

__all__ = [
    'create_insights_panel',
    'create_persona_table',
    'create_transcript_table',
    'truncate_text',
]
