"""
nuts-tool - Manage encrypted nuts containers and the archives stored in them
"""

__version__ = "0.1.0"

from .core import NutsTool, open_named_container
from .errors import NutsError

__all__ = ["NutsTool", "NutsError", "open_named_container"]
