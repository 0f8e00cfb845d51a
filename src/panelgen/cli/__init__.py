"""CLI package for panelgen."""

from .app import app

__all__ = ['app']
