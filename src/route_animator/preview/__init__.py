"""Live preview playback.

Public API
----------
PreviewPlayer     - play / pause / toggle / seek / update_state
Scheduler         - tick scheduling protocol
AsyncioScheduler  - event-loop scheduler (~60 Hz)
ManualScheduler   - synthetic clock for tests
"""

from route_animator.preview.player import PreviewPlayer
from route_animator.preview.scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = ["AsyncioScheduler", "ManualScheduler", "PreviewPlayer", "Scheduler"]
