"""
Cast State Machine Module

Tracks the physical gesture of a casting session from per-sample force
magnitudes:

1. Shake detection (user acceleration above threshold)
2. Freefall detection (raw force near zero)
3. Impact detection (raw force spike while falling)

Every sample is evaluated; the latest reading decides the state.
The impact is reported once per session.
"""

from __future__ import annotations

from enum import Enum
from collections import deque
from typing import Dict, Optional
import time


# ---------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------

class CastState(Enum):
    IDLE = "idle"
    LISTENING = "listening"
    SHAKING = "shaking"
    FALLING = "falling"
    LANDED = "landed"


# ---------------------------------------------------------------------
# CAST STATE MACHINE
# ---------------------------------------------------------------------

class CastStateMachine:
    """
    Shake/drop detector for one collection session.

    LISTENING → SHAKING ⇄ FALLING → LANDED

    Thresholds are in m/s². Checks run in order (shake, freefall, impact)
    and each one sees the state left by the check before it, so a spike
    whose user acceleration counts as shaking does not land.
    """

    SHAKE_THRESHOLD = 15.0      # user (gravity-excluded) magnitude
    FREEFALL_THRESHOLD = 2.0    # raw magnitude, ~0 g while falling
    IMPACT_THRESHOLD = 20.0     # raw magnitude on landing

    def __init__(
        self,
        shake_threshold: Optional[float] = None,
        freefall_threshold: Optional[float] = None,
        impact_threshold: Optional[float] = None,
    ):
        self.shake_threshold = self.SHAKE_THRESHOLD if shake_threshold is None else shake_threshold
        self.freefall_threshold = self.FREEFALL_THRESHOLD if freefall_threshold is None else freefall_threshold
        self.impact_threshold = self.IMPACT_THRESHOLD if impact_threshold is None else impact_threshold

        self.state = CastState.IDLE
        self.state_entered_at = time.time()
        self.impact_detected = False
        self.history = deque(maxlen=100)

    def start(self) -> None:
        """Begin a fresh session in LISTENING."""
        self.impact_detected = False
        self.history.clear()
        self._transition(CastState.LISTENING, "Session started")

    def update(self, *, raw_magnitude: float, user_magnitude: float) -> bool:
        """
        Feed one sample.

        Returns True only for the sample that completes the first drop of
        the session.
        """
        if user_magnitude > self.shake_threshold:
            self._transition(CastState.SHAKING, f"User force {user_magnitude:.1f} m/s²")

        if raw_magnitude < self.freefall_threshold:
            self._transition(CastState.FALLING, f"Raw force {raw_magnitude:.2f} m/s²")

        if self.state == CastState.FALLING and raw_magnitude > self.impact_threshold:
            self._transition(CastState.LANDED, f"Impact {raw_magnitude:.1f} m/s²")
            if not self.impact_detected:
                self.impact_detected = True
                return True

        return False

    def stop(self) -> None:
        self._transition(CastState.IDLE, "Session finalized")

    def _transition(self, new_state: CastState, reason: str) -> None:
        if new_state == self.state:
            return

        self.history.append({
            "time": time.time(),
            "from": self.state.value,
            "to": new_state.value,
            "reason": reason
        })
        self.state = new_state
        self.state_entered_at = time.time()

    def get_status(self) -> Dict:
        return {
            "state": self.state.value,
            "impact_detected": self.impact_detected,
            "duration": time.time() - self.state_entered_at
        }
