"""
Cast Event Logging Module
In-memory record of casting sessions, impacts and revealed signs
"""

import json
import logging
import time
from collections import deque
from datetime import datetime, date
from typing import Dict, List, Optional
from enum import Enum

from .data.models import CastResult, SignDescriptor

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event type classifications"""
    SESSION_STARTED = "session_started"
    SESSION_FAILED = "session_failed"
    IMPACT = "impact"
    CAST_COMPLETED = "cast_completed"
    SIGN_REVEALED = "sign_revealed"


class CastLogger:
    """
    Keeps recent cast events and daily counters in memory

    Features:
    - Per-event dict records
    - Daily aggregation (casts by source, impacts, meji count)
    - Bounded event buffer
    """

    def __init__(self, buffer_size: int = 100):
        """
        Initialize cast logger

        Args:
            buffer_size: Number of recent events to keep in memory
        """
        self.buffer_size = buffer_size
        self.event_buffer = deque(maxlen=buffer_size)
        self.event_counter = 0
        self.current_date = date.today()
        self._reset_daily_metrics()

    def log_session_started(self, source_name: str, timestamp: Optional[float] = None) -> Dict:
        return self._log(EventType.SESSION_STARTED, timestamp, source=source_name)

    def log_session_failed(self, source_name: str, reason: str, timestamp: Optional[float] = None) -> Dict:
        """Sensor unavailable or permission refused"""
        event = self._log(EventType.SESSION_FAILED, timestamp, source=source_name, reason=reason)
        self.daily_metrics['sessions']['failed'] += 1
        return event

    def log_impact(self, sample_count: int, timestamp: Optional[float] = None) -> Dict:
        event = self._log(EventType.IMPACT, timestamp, sample_count=sample_count)
        self.daily_metrics['impacts'] += 1
        return event

    def log_cast(self, result: CastResult, timestamp: Optional[float] = None) -> Dict:
        """
        Log a finalized cast

        Args:
            result: Outcome returned by the collector
            timestamp: Event timestamp (defaults to now)

        Returns:
            Event record dictionary
        """
        event = self._log(
            EventType.CAST_COMPLETED,
            timestamp,
            seed=result.seed,
            source=result.source.value,
            sample_count=result.sample_count,
            impact=result.impact,
        )
        casts = self.daily_metrics['casts']
        casts['total'] += 1
        casts[result.source.value] += 1
        return event

    def log_sign(self, descriptor: SignDescriptor, timestamp: Optional[float] = None) -> Dict:
        event = self._log(
            EventType.SIGN_REVEALED,
            timestamp,
            index=descriptor.index,
            name=descriptor.name,
            binary_signature=descriptor.binary_signature,
        )
        if descriptor.is_meji:
            self.daily_metrics['meji'] += 1
        self.daily_metrics['signs'][descriptor.name] = self.daily_metrics['signs'].get(descriptor.name, 0) + 1
        return event

    def _log(self, event_type: EventType, timestamp: Optional[float], **data) -> Dict:
        if timestamp is None:
            timestamp = time.time()

        event = {
            'event_id': self._get_next_id(),
            'event_type': event_type.value,
            'timestamp': timestamp,
            'datetime': datetime.fromtimestamp(timestamp).isoformat(),
            'data': data
        }

        self._check_daily_reset()
        self.event_buffer.append(event)
        logger.debug("%s %s", event_type.value, data)
        return event

    def _get_next_id(self) -> int:
        self.event_counter += 1
        return self.event_counter

    def _check_daily_reset(self) -> None:
        today = date.today()
        if today != self.current_date:
            self._reset_daily_metrics()
            self.current_date = today

    def _reset_daily_metrics(self) -> None:
        self.daily_metrics = {
            'date': date.today().isoformat(),
            'sessions': {
                'failed': 0
            },
            'casts': {
                'total': 0,
                'physical': 0,
                'fallback': 0
            },
            'impacts': 0,
            'meji': 0,
            'signs': {}
        }

    def get_recent_events(self, n: int = 10, event_type: Optional[EventType] = None) -> List[Dict]:
        """
        Get recent events from buffer

        Args:
            n: Number of events to return
            event_type: Filter by event type (optional)

        Returns:
            List of event dictionaries, oldest first
        """
        events = list(self.event_buffer)
        if event_type:
            events = [e for e in events if e['event_type'] == event_type.value]
        return events[-n:]

    def get_daily_metrics(self) -> Dict:
        """Copy of today's counters"""
        return json.loads(json.dumps(self.daily_metrics))

    def to_json(self) -> str:
        return json.dumps(list(self.event_buffer), indent=2)

    def clear_buffer(self) -> None:
        self.event_buffer.clear()
