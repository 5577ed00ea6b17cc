"""Caster configuration."""

from dataclasses import dataclass, fields
from typing import Any, Mapping

from .state_machines import CastStateMachine


@dataclass
class CasterConfig:
    """
    Tunable values for the entropy collector.

    Thresholds default to the state machine constants (m/s²).
    """
    shake_threshold: float = CastStateMachine.SHAKE_THRESHOLD
    freefall_threshold: float = CastStateMachine.FREEFALL_THRESHOLD
    impact_threshold: float = CastStateMachine.IMPACT_THRESHOLD
    seed_scale: float = 100000.0  # chaos sum multiplier before mod 256
    jitter: float = 0.0           # max random perturbation added per sample

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CasterConfig":
        """Create config from a mapping, ignoring unknown keys."""
        names = {f.name for f in fields(cls)}
        return cls(**{k: float(v) for k, v in data.items() if k in names})

    def build_state_machine(self) -> CastStateMachine:
        return CastStateMachine(
            shake_threshold=self.shake_threshold,
            freefall_threshold=self.freefall_threshold,
            impact_threshold=self.impact_threshold,
        )
