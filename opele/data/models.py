"""
Data models and types for the casting system.

Defines the motion readings consumed by the entropy collector and the
descriptors produced by the sign mapper.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Mapping, Optional, Tuple
import numpy as np


class LegMark(Enum):
    """Visual state of a single seed on the chain."""
    OPEN = "open"
    CLOSED = "closed"


class CastSource(Enum):
    """Where a seed came from."""
    PHYSICAL = "physical"  # Weighted sum of collected samples
    FALLBACK = "fallback"  # Random generator (no samples)


@dataclass(frozen=True)
class AxisReading:
    """
    Single 3-axis acceleration vector.

    Any axis may be missing (None); missing axes count as 0.
    Values in m/s².
    """
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None

    @property
    def vector(self) -> np.ndarray:
        """Acceleration as numpy array, missing axes filled with 0."""
        return np.array(
            [0.0 if axis is None else axis for axis in (self.x, self.y, self.z)],
            dtype=float,
        )

    @property
    def magnitude(self) -> float:
        """Euclidean norm of the vector."""
        return float(np.linalg.norm(self.vector))

    @classmethod
    def from_value(cls, value: Any) -> Optional["AxisReading"]:
        """Build from a mapping or an (x, y, z) sequence; None stays None."""
        if value is None or isinstance(value, AxisReading):
            return value
        if isinstance(value, Mapping):
            return cls(x=value.get("x"), y=value.get("y"), z=value.get("z"))
        x, y, z = (list(value) + [None, None, None])[:3]
        return cls(x=x, y=y, z=z)


@dataclass(frozen=True)
class MotionEvent:
    """
    One motion sample from a sensor.

    Mirrors the browser devicemotion payload: a gravity-inclusive vector,
    a gravity-excluded (user) vector and the sampling interval. Either
    vector may be absent altogether.
    """
    acceleration_including_gravity: Optional[AxisReading] = None
    acceleration: Optional[AxisReading] = None
    interval: Optional[float] = None  # seconds, None if unknown

    @property
    def is_complete(self) -> bool:
        """Both vectors present."""
        return (
            self.acceleration_including_gravity is not None
            and self.acceleration is not None
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MotionEvent":
        """
        Create event from an untyped payload.

        Accepts camelCase devicemotion keys or their snake_case equivalents.
        """
        raw = data.get("accelerationIncludingGravity", data.get("acceleration_including_gravity"))
        return cls(
            acceleration_including_gravity=AxisReading.from_value(raw),
            acceleration=AxisReading.from_value(data.get("acceleration")),
            interval=data.get("interval"),
        )


@dataclass(frozen=True)
class SignDescriptor:
    """
    Descriptor of one of the 256 signs.

    Derived deterministically from a seed in [0, 255].
    """
    index: int
    binary_signature: str  # 8 chars, right leg first
    name: str
    right_leg: Tuple[LegMark, ...]
    left_leg: Tuple[LegMark, ...]

    @property
    def is_meji(self) -> bool:
        """Both legs identical."""
        return self.binary_signature[:4] == self.binary_signature[4:]

    def to_dict(self) -> dict:
        """Plain dict with leg marks as strings."""
        data = asdict(self)
        data["right_leg"] = [mark.value for mark in self.right_leg]
        data["left_leg"] = [mark.value for mark in self.left_leg]
        return data


@dataclass(frozen=True)
class CastResult:
    """Outcome of finalizing a collection session."""
    seed: int
    source: CastSource
    sample_count: int
    impact: bool = False
