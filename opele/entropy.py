"""
Entropy collector.

Turns a stream of motion samples into an 8-bit seed (0-255) and detects a
drop gesture so the caller can cast without a second tap. Devices without a
sensor (or without permission) cast from the random generator instead.
"""

import functools
import logging
import math
import threading
from fractions import Fraction
from typing import Callable, List, Optional, Sequence

import numpy as np

from .config import CasterConfig
from .data.models import CastResult, CastSource, MotionEvent
from .data.source import MotionSource, Subscription
from .errors import AlreadyActive, PermissionDenied, Unsupported
from .event_logger import CastLogger
from .state_machines import CastState, CastStateMachine

logger = logging.getLogger(__name__)

SEED_RANGE = 256


def seed_from_samples(samples: Sequence[float], scale: float = 100000.0) -> int:
    """
    Weighted sum of samples reduced to 0-255.

    Sample i (0-based) is weighted by i + 1, so later samples count more
    and reordering changes the result.

    When the scaled sum overflows a float, it is recomputed exactly over
    the finite samples instead.
    """
    values = np.asarray(samples, dtype=float)
    weights = np.arange(1, len(values) + 1, dtype=float)
    with np.errstate(over="ignore", invalid="ignore"):
        chaos_sum = float(np.dot(values, weights))
    scaled = chaos_sum * scale
    if math.isfinite(scaled):
        return int(math.floor(scaled)) % SEED_RANGE

    exact = sum(
        (Fraction(float(v)) * (i + 1) for i, v in enumerate(values) if math.isfinite(v)),
        Fraction(0),
    )
    return math.floor(exact * Fraction(scale)) % SEED_RANGE


class ImpactSignal:
    """
    "Cast now" notification.

    Listeners take no arguments. The collector emits at most once per
    session.
    """

    def __init__(self):
        self._listeners: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    def connect(self, listener: Callable[[], None]) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def disconnect(self, listener: Callable[[], None]) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def emit(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener()


class CastSession:
    """
    One collection session.

    Owns the ordered sample magnitudes, the gesture state machine and the
    sensor subscription. Mutations are guarded by a lock because live
    sources deliver samples from a reader thread.
    """

    def __init__(self, state_machine: CastStateMachine):
        self.state_machine = state_machine
        self.samples: List[float] = []
        self.subscription: Optional[Subscription] = None
        self.active = True
        self._lock = threading.Lock()
        self.state_machine.start()

    @property
    def state(self) -> CastState:
        return self.state_machine.state

    def attach(self, source: MotionSource, listener: Callable[[MotionEvent], None]) -> bool:
        """Subscribe to the source unless the session was finalized meanwhile."""
        with self._lock:
            if not self.active:
                return False
            self.subscription = source.subscribe(listener)
            return True

    def record(self, value: float, raw_magnitude: float, user_magnitude: float) -> bool:
        """Append one sample and update the state. True on the first impact."""
        with self._lock:
            if not self.active:
                return False
            self.samples.append(value)
            return self.state_machine.update(
                raw_magnitude=raw_magnitude,
                user_magnitude=user_magnitude,
            )

    def finalize(self):
        """Stop the session, release the sensor and hand back the samples."""
        with self._lock:
            self.active = False
            samples, self.samples = self.samples, []
            impact = self.state_machine.impact_detected
            subscription, self.subscription = self.subscription, None
            self.state_machine.stop()
        # Released outside the lock: a reader thread may be waiting on it.
        if subscription is not None:
            subscription.release()
        return samples, impact


class EntropyCollector:
    """
    Produces seeds from motion sensor entropy.

    Usage:
        collector = EntropyCollector()
        collector.impact.connect(on_drop)
        try:
            await collector.start_session(source)
        except CastError:
            pass  # stop_and_cast() falls back to the random generator
        ...
        seed = collector.stop_and_cast()

    Starting a second session while one is active raises AlreadyActive and
    leaves the running session untouched.
    """

    def __init__(
        self,
        config: Optional[CasterConfig] = None,
        rng: Optional[np.random.Generator] = None,
        event_logger: Optional[CastLogger] = None,
    ):
        """
        Initialize collector.

        Args:
            config: Thresholds, seed scale and jitter (None for defaults)
            rng: Random generator for the fallback seed and jitter
            event_logger: Optional domain event log
        """
        self.config = config or CasterConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.event_logger = event_logger
        self.impact = ImpactSignal()

        self._session: Optional[CastSession] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> CastState:
        session = self._session
        return session.state if session is not None else CastState.IDLE

    @property
    def is_active(self) -> bool:
        session = self._session
        return session is not None and session.active

    @property
    def sample_count(self) -> int:
        session = self._session
        return len(session.samples) if session is not None else 0

    async def start_session(self, source: MotionSource) -> bool:
        """
        Request sensor access and start collecting samples.

        Returns False if the session was cast while the permission request
        was pending.

        Raises:
            AlreadyActive: a session is already running
            Unsupported: the source has no motion sensor
            PermissionDenied: the user refused sensor access
        """
        source_name = type(source).__name__
        with self._lock:
            if self._session is not None and self._session.active:
                raise AlreadyActive("A casting session is already active")
            session = CastSession(self.config.build_state_machine())
            self._session = session

        try:
            if not source.is_available():
                raise Unsupported(f"{source_name} has no motion sensor")
            if not await source.request_permission():
                raise PermissionDenied("Sensor permission denied")
        except (Unsupported, PermissionDenied) as e:
            logger.warning("%s. Casting will use the fallback generator.", e)
            with self._lock:
                if self._session is session:
                    self._session = None
            session.finalize()
            if self.event_logger:
                self.event_logger.log_session_failed(source_name, str(e))
            raise

        if not session.attach(source, functools.partial(self._handle_motion, session)):
            logger.info("Session was cast before sensor access was granted")
            return False

        logger.info("Collecting motion entropy from %s", source_name)
        if self.event_logger:
            self.event_logger.log_session_started(source_name)
        return True

    def _handle_motion(self, session: CastSession, event: MotionEvent) -> None:
        if not event.is_complete:
            logger.debug("Discarding motion sample without both acceleration vectors")
            return

        raw_magnitude = event.acceleration_including_gravity.magnitude
        user_magnitude = event.acceleration.magnitude
        interval = event.interval if event.interval is not None else 1.0

        value = raw_magnitude * interval
        if not all(math.isfinite(v) for v in (raw_magnitude, user_magnitude, interval, value)):
            logger.debug("Discarding non-finite motion sample")
            return
        if self.config.jitter:
            value += float(self.rng.random()) * self.config.jitter

        if session.record(value, raw_magnitude, user_magnitude):
            logger.info("Drop impact detected after %d samples", len(session.samples))
            if self.event_logger:
                self.event_logger.log_impact(len(session.samples))
            self.impact.emit()

    def cast(self) -> CastResult:
        """Finalize the session (if any) and derive the seed."""
        with self._lock:
            session, self._session = self._session, None

        if session is not None:
            samples, impact = session.finalize()
        else:
            samples, impact = [], False

        if samples:
            seed = seed_from_samples(samples, self.config.seed_scale)
            source = CastSource.PHYSICAL
        else:
            seed = int(self.rng.integers(0, SEED_RANGE))
            source = CastSource.FALLBACK

        logger.info("Cast %d from %s entropy (%d samples)", seed, source.value, len(samples))
        result = CastResult(seed=seed, source=source, sample_count=len(samples), impact=impact)
        if self.event_logger:
            self.event_logger.log_cast(result)
        return result

    def stop_and_cast(self) -> int:
        """
        Stop sampling and return a seed in 0-255.

        Safe to call at any time, including repeatedly.
        """
        return self.cast().seed
