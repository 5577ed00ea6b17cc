"""
Opele Casting Dashboard
Tap to cast, shake or drop to cast, then read the verse

Run with: streamlit run cast_dashboard.py
"""

import asyncio
import streamlit as st
import numpy as np

from opele.chart import build_chain_figure, build_source_chart
from opele.config import CasterConfig
from opele.data.source import MockMotionSource
from opele.entropy import EntropyCollector
from opele.errors import CastError
from opele.event_logger import CastLogger, EventType
from opele.mapper import get_profile, to_binary
from opele.state_machines import CastState
from opele.verses import VerseLibrary

# Serial import
try:
    from opele.data.live.serial_source import SerialMotionSource
    SERIAL_AVAILABLE = True
except ImportError:
    SERIAL_AVAILABLE = False

SHRINE_CSS = """
<style>
    .stApp {
        background: radial-gradient(circle at top, #3b2814 0%, #1c130a 70%);
        color: #cbb486;
    }

    .odu-title {
        font-size: 2.5rem !important;
        font-weight: 700;
        text-align: center;
        color: #ffdd9e;
        margin: 1rem 0 0.25rem 0;
    }

    .verse-yoruba {
        font-style: italic;
        text-align: center;
        font-size: 1.2rem;
    }

    .verse-english {
        text-align: center;
        opacity: 0.85;
    }
</style>
"""


def init_session_state():
    """Create the caster objects once per browser session."""
    if 'collector' in st.session_state:
        return

    st.session_state.cast_logger = CastLogger()
    st.session_state.collector = EntropyCollector(
        config=CasterConfig(),
        rng=np.random.default_rng(),
        event_logger=st.session_state.cast_logger,
    )
    st.session_state.source = MockMotionSource()
    st.session_state.verses = VerseLibrary.default()
    st.session_state.landed = {'flag': False}
    st.session_state.is_casting = False
    st.session_state.profile = None
    st.session_state.instruction = "SHAKE OR TAP TO CAST"

    landed = st.session_state.landed
    st.session_state.collector.impact.connect(lambda: landed.update(flag=True))


def start_casting():
    st.session_state.landed['flag'] = False
    try:
        asyncio.run(st.session_state.collector.start_session(st.session_state.source))
        st.session_state.instruction = "SHAKE DEVICE OR DROP ON PAD"
    except CastError as e:
        st.session_state.instruction = f"Sensors blocked ({e}). Tap again to force cast."
    st.session_state.is_casting = True


def reveal(method: str):
    result = st.session_state.collector.cast()
    profile = get_profile(result.seed)
    st.session_state.cast_logger.log_sign(profile)
    st.session_state.profile = profile
    st.session_state.is_casting = False
    st.session_state.instruction = f"Cast via {method} ({result.source.value} entropy)"


def render_controls():
    col1, col2, col3 = st.columns(3)

    with col1:
        if not st.session_state.is_casting:
            if st.button("Tap to Cast", use_container_width=True):
                start_casting()
                st.rerun()
        elif st.button("Manual Stop", use_container_width=True):
            reveal("Manual Stop")
            st.rerun()

    source = st.session_state.source
    simulate = st.session_state.is_casting and isinstance(source, MockMotionSource)

    with col2:
        if st.button("Shake", use_container_width=True, disabled=not simulate):
            source.play(source.shake(30))

    with col3:
        if st.button("Drop", use_container_width=True, disabled=not simulate):
            source.play(source.drop())

    if st.session_state.is_casting and st.session_state.landed['flag']:
        reveal("Drop Impact Detected")
        st.rerun()

    state = st.session_state.collector.state
    if state != CastState.IDLE:
        st.caption(f"State: {state.value}  |  Samples: {st.session_state.collector.sample_count}")


def render_reading():
    profile = st.session_state.profile
    if profile is None:
        return

    entry = st.session_state.verses.lookup(profile.index)
    title = profile.name
    if entry and entry.alias:
        title += f" ({entry.alias[0]})"
    st.markdown(f'<div class="odu-title">{title}</div>', unsafe_allow_html=True)

    st.plotly_chart(build_chain_figure(profile), use_container_width=True)

    verse = entry.first_verse if entry else None
    if verse is None:
        st.info(
            f"The verse for this sign (Index: {profile.index}) is not yet in the library. "
            f"Binary Signature: {to_binary(profile.index)}"
        )
        return

    st.markdown(f'<div class="verse-yoruba">"{verse.chant_yoruba}"</div>', unsafe_allow_html=True)
    st.markdown(f'<div class="verse-english">"{verse.translation}"</div>', unsafe_allow_html=True)
    st.markdown(f"**Message:** {verse.message}")
    st.markdown(f"**Prescription:** {verse.prescription}")


def render_sidebar():
    st.sidebar.markdown("### Sensor")
    if SERIAL_AVAILABLE:
        port = st.sidebar.text_input("Serial port", value="/dev/ttyUSB0")
        if st.sidebar.button("Use serial sensor", disabled=st.session_state.is_casting):
            st.session_state.source.close()
            st.session_state.source = SerialMotionSource(port=port)
        if st.sidebar.button("Use simulated sensor", disabled=st.session_state.is_casting):
            st.session_state.source.close()
            st.session_state.source = MockMotionSource()
    st.sidebar.caption(type(st.session_state.source).__name__)

    st.sidebar.markdown("### Today")
    metrics = st.session_state.cast_logger.get_daily_metrics()
    st.sidebar.metric("Casts", metrics['casts']['total'])
    st.sidebar.metric("Drops detected", metrics['impacts'])
    st.sidebar.plotly_chart(build_source_chart(metrics), use_container_width=True)

    st.sidebar.markdown("### Recent Signs")
    recent = st.session_state.cast_logger.get_recent_events(5, EventType.SIGN_REVEALED)
    if not recent:
        st.sidebar.caption("No casts yet")
    for event in reversed(recent):
        st.sidebar.caption(f"{event['datetime'][11:19]}  {event['data']['name']}")


def main():
    st.set_page_config(page_title="Opele", layout="centered")
    st.markdown(SHRINE_CSS, unsafe_allow_html=True)
    init_session_state()

    st.title("Opele")
    st.caption(st.session_state.instruction)

    render_controls()
    render_reading()
    render_sidebar()


if __name__ == "__main__":
    main()
