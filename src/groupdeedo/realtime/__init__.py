"""Real-time membership, matching and fan-out for connected chat clients."""

from .fanout import FanoutRouter
from .hub import ChatHub
from .matching import matches, normalize_channel
from .moderation import ModerationTrigger
from .registry import MembershipRegistry, Participant
from .snapshot import SnapshotLoader

__all__ = [
    "ChatHub",
    "FanoutRouter",
    "MembershipRegistry",
    "ModerationTrigger",
    "Participant",
    "SnapshotLoader",
    "matches",
    "normalize_channel",
]
