"""Group handler and its per-group command session."""

from .group import HueGroupHandler
from .session import CommandSession

__all__ = ["CommandSession", "HueGroupHandler"]
