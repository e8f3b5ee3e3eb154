"""
Debounced activity tracking.

Provides:
- Per-note debounce timers coalescing bursts of modifications
- Single-flight state machine (one generation per note at a time)
- Explicitly owned registry of tracking entries
"""

from .monitor import ActivityTracker
from .registry import TrackingEntry, TrackingRegistry, TrackingState

__all__ = [
    "ActivityTracker",
    "TrackingEntry",
    "TrackingRegistry",
    "TrackingState",
]
