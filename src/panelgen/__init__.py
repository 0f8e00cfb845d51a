"""
Panelgen - AI-powered focus group simulator.
"""

__version__ = "0.1.0"

from . import models
from . import services

__all__ = ["models", "services"]
