"""Event sources: the ESPN API and an in-memory fixture."""

from .espn import EspnEventSource
from .fixture import FixtureEventSource

__all__ = ["EspnEventSource", "FixtureEventSource"]
