import json

from opele.data.models import CastResult, CastSource
from opele.event_logger import CastLogger, EventType
from opele.mapper import get_profile


def test_cast_and_sign_counters():
    log = CastLogger()
    log.log_cast(CastResult(seed=0, source=CastSource.FALLBACK, sample_count=0))
    log.log_cast(CastResult(seed=153, source=CastSource.PHYSICAL, sample_count=40, impact=True))
    log.log_sign(get_profile(0))
    log.log_sign(get_profile(153))
    log.log_sign(get_profile(15))

    metrics = log.get_daily_metrics()
    assert metrics['casts'] == {'total': 2, 'physical': 1, 'fallback': 1}
    assert metrics['meji'] == 2
    assert metrics['signs']['Eji Ogbe'] == 1
    assert metrics['signs']['Ogbe-Oyeku'] == 1


def test_event_ids_and_filtering():
    log = CastLogger()
    log.log_session_started("MockMotionSource", timestamp=1_700_000_000.0)
    log.log_session_failed("MockMotionSource", "denied", timestamp=1_700_000_001.0)
    log.log_impact(12, timestamp=1_700_000_002.0)

    events = log.get_recent_events()
    assert [e['event_id'] for e in events] == [1, 2, 3]
    failed = log.get_recent_events(event_type=EventType.SESSION_FAILED)
    assert failed[0]['data'] == {'source': 'MockMotionSource', 'reason': 'denied'}
    assert log.get_daily_metrics()['sessions']['failed'] == 1


def test_buffer_is_bounded():
    log = CastLogger(buffer_size=3)
    for i in range(5):
        log.log_impact(i)
    assert len(log.event_buffer) == 3
    assert log.get_recent_events()[0]['data']['sample_count'] == 2


def test_zero_seed_is_recorded():
    log = CastLogger()
    event = log.log_sign(get_profile(0))
    assert event['data']['index'] == 0
    assert json.loads(log.to_json())[0]['data']['name'] == "Eji Ogbe"


def test_metrics_copy_is_independent():
    log = CastLogger()
    metrics = log.get_daily_metrics()
    metrics['casts']['total'] = 99
    assert log.get_daily_metrics()['casts']['total'] == 0
    log.clear_buffer()
    assert log.get_recent_events() == []
