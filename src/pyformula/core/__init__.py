"""Core configuration and utilities for PyFormula."""

from pyformula.core.config import settings
from pyformula.core.logging import setup_logging

__all__ = ["settings", "setup_logging"]
