"""
Opele caster.

Derives an 8-bit seed from motion-sensor entropy and maps it to one of the
256 signs.
"""

from .config import CasterConfig
from .data.models import CastResult, CastSource, LegMark, MotionEvent, SignDescriptor
from .entropy import EntropyCollector, seed_from_samples
from .errors import AlreadyActive, CastError, PermissionDenied, Unsupported
from .mapper import SignMapper, get_profile, to_binary
from .state_machines import CastState

__version__ = "0.1.0"

__all__ = [
    "CasterConfig",
    "CastResult",
    "CastSource",
    "LegMark",
    "MotionEvent",
    "SignDescriptor",
    "EntropyCollector",
    "seed_from_samples",
    "AlreadyActive",
    "CastError",
    "PermissionDenied",
    "Unsupported",
    "SignMapper",
    "get_profile",
    "to_binary",
    "CastState",
]
