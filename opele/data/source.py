"""
Motion source abstraction and mock implementation.

Defines the interface the entropy collector subscribes to and provides a
scripted mock source for testing and development. Live sensor sources
should inherit from the base MotionSource class.
"""

from abc import ABC, abstractmethod
import threading
from typing import Callable, Iterable, List, Optional

import numpy as np

from .models import AxisReading, MotionEvent

MotionListener = Callable[[MotionEvent], None]


class Subscription:
    """
    Handle for one listener registered on a motion source.

    Released exactly once; further calls to release() do nothing.
    """

    def __init__(self, source: "MotionSource", listener: MotionListener):
        self._source = source
        self._listener = listener
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Stop delivering events to the listener."""
        if self._released:
            return
        self._released = True
        self._source._remove_listener(self._listener)


class MotionSource(ABC):
    """
    Abstract base class for motion sensor sources.

    Sources push MotionEvent objects to subscribed listeners. Subclasses
    decide how events are produced (scripted, serial, ...).
    """

    def __init__(self):
        self._listeners: List[MotionListener] = []
        self._listeners_lock = threading.Lock()

    @abstractmethod
    def is_available(self) -> bool:
        """Whether a motion sensor exists at all."""
        pass

    async def request_permission(self) -> bool:
        """
        Ask for access to the sensor.

        Sources without a permission gate grant immediately.
        """
        return True

    def subscribe(self, listener: MotionListener) -> Subscription:
        """Register a listener and return its subscription handle."""
        with self._listeners_lock:
            self._listeners.append(listener)
        self._on_listeners_changed()
        return Subscription(self, listener)

    @property
    def listener_count(self) -> int:
        with self._listeners_lock:
            return len(self._listeners)

    def _remove_listener(self, listener: MotionListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
        self._on_listeners_changed()

    def _on_listeners_changed(self) -> None:
        """Hook for sources that start/stop hardware with their listeners."""
        pass

    def _dispatch(self, event: MotionEvent) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(event)

    def close(self) -> None:
        """Clean up resources and drop all listeners."""
        with self._listeners_lock:
            self._listeners.clear()


class MockMotionSource(MotionSource):
    """
    Mock motion source for testing and development.

    Events are pushed explicitly with emit()/play(). The gesture helpers
    build realistic sample streams:
    - rest: device lying still (gravity only)
    - shake: vigorous user acceleration above the shake threshold
    - drop: freefall (near-zero raw force) followed by an impact spike
    """

    GRAVITY = 9.81  # m/s²
    SAMPLE_INTERVAL = 1.0 / 60.0  # seconds, typical devicemotion rate

    def __init__(
        self,
        available: bool = True,
        permission_granted: bool = True,
        noise_level: float = 0.05,
        sample_interval: Optional[float] = SAMPLE_INTERVAL,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize mock source.

        Args:
            available: Whether the simulated device has a motion sensor
            permission_granted: Answer given to request_permission()
            noise_level: Standard deviation of accelerometer noise (m/s²)
            sample_interval: Interval reported on generated events
            rng: Random generator for the gesture noise
        """
        super().__init__()
        self.available = available
        self.permission_granted = permission_granted
        self.noise_level = noise_level
        self.sample_interval = sample_interval
        self._rng = rng if rng is not None else np.random.default_rng()
        self.permission_requests = 0

    def is_available(self) -> bool:
        return self.available

    async def request_permission(self) -> bool:
        self.permission_requests += 1
        return self.permission_granted

    def emit(self, event: MotionEvent) -> None:
        """Deliver a single event to every listener."""
        self._dispatch(event)

    def play(self, events: Iterable[MotionEvent]) -> int:
        """Deliver a sequence of events in order, returning how many were sent."""
        count = 0
        for event in events:
            self._dispatch(event)
            count += 1
        return count

    def _noise(self) -> np.ndarray:
        return self._rng.normal(0, self.noise_level, 3)

    def _event(self, raw: np.ndarray, user: np.ndarray) -> MotionEvent:
        return MotionEvent(
            acceleration_including_gravity=AxisReading(*(float(v) for v in raw)),
            acceleration=AxisReading(*(float(v) for v in user)),
            interval=self.sample_interval,
        )

    def rest(self, n: int = 10) -> List[MotionEvent]:
        """Device lying flat: raw ≈ gravity, user ≈ 0."""
        events = []
        for _ in range(n):
            user = self._noise()
            raw = np.array([0.0, 0.0, self.GRAVITY]) + user
            events.append(self._event(raw, user))
        return events

    def shake(self, n: int = 20, intensity: float = 25.0) -> List[MotionEvent]:
        """Vigorous shaking with user acceleration of roughly `intensity`."""
        events = []
        for _ in range(n):
            direction = self._rng.normal(0, 1, 3)
            direction /= np.linalg.norm(direction) or 1.0
            user = direction * intensity + self._noise()
            raw = np.array([0.0, 0.0, self.GRAVITY]) + user
            events.append(self._event(raw, user))
        return events

    def drop(self, fall_samples: int = 5, impact: float = 22.0) -> List[MotionEvent]:
        """
        Freefall for `fall_samples` readings, then one impact spike.

        The spike's user acceleration is `impact` minus gravity; above
        about 24.8 it reads as shaking and the drop does not land.
        """
        events = []
        for _ in range(fall_samples):
            raw = self._noise()
            user = np.array([0.0, 0.0, -self.GRAVITY]) + raw
            events.append(self._event(raw, user))
        raw = np.array([0.0, 0.0, impact])
        user = raw - np.array([0.0, 0.0, self.GRAVITY])
        events.append(self._event(raw, user))
        return events
