"""Data models and motion source layer."""

from .models import (
    LegMark,
    CastSource,
    AxisReading,
    MotionEvent,
    SignDescriptor,
    CastResult,
)
from .source import MotionSource, MockMotionSource, Subscription

__all__ = [
    "LegMark",
    "CastSource",
    "AxisReading",
    "MotionEvent",
    "SignDescriptor",
    "CastResult",
    "MotionSource",
    "MockMotionSource",
    "Subscription",
]
