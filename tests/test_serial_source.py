import asyncio
import threading
import time

import pytest
import serial

from opele.data.live import serial_source
from opele.data.live.serial_source import G, SerialMotionSource, parse_line
from opele.entropy import EntropyCollector


class FakeSerial:
    """Stands in for serial.Serial, replaying canned lines."""

    def __init__(self, lines):
        self._lines = list(lines)
        self.closed = False

    def readline(self):
        if self._lines:
            return (self._lines.pop(0) + "\n").encode()
        time.sleep(0.01)
        return b""

    def reset_input_buffer(self):
        pass

    def close(self):
        self.closed = True


def line(ax, ay, az, lx=None, ly=None, lz=None):
    text = f"ACCEL (g): X={ax:.3f} Y={ay:.3f} Z={az:.3f}"
    if lx is not None:
        text += f" | LINEAR (g): X={lx:.3f} Y={ly:.3f} Z={lz:.3f}"
    return text


def test_parse_line_with_linear_block():
    e = parse_line(line(0, 0, 1, 0, 0, 0.5), interval=0.02)
    assert e.acceleration_including_gravity.z == pytest.approx(G)
    assert e.acceleration.z == pytest.approx(0.5 * G)
    assert e.interval == 0.02
    assert e.is_complete


def test_parse_line_without_linear_block():
    e = parse_line(line(0.1, -0.2, 1.0))
    assert e.acceleration_including_gravity.x == pytest.approx(0.1 * G)
    assert e.acceleration is None
    assert not e.is_complete


def test_parse_line_ignores_noise():
    assert parse_line("MPU6050 ready") is None
    assert parse_line("") is None


def test_unavailable_when_port_cannot_open(monkeypatch):
    def fail(*args, **kwargs):
        raise serial.SerialException("no such port")

    monkeypatch.setattr(serial_source.serial, "Serial", fail)
    assert SerialMotionSource(port="/dev/nope").is_available() is False


def test_reader_thread_feeds_collector_until_drop():
    source = SerialMotionSource(port="fake", reset_delay=0)
    source.ser = FakeSerial([
        line(0, 0, 1, 0, 0, 0),
        "garbage",
        line(0, 0, 0.05, 0, 0, -0.95),
        line(0, 0, 2.5, 0, 0, 1.2),
        line(0, 0, 1, 0, 0, 0),
    ])

    collector = EntropyCollector()
    landed = threading.Event()
    collector.impact.connect(landed.set)

    asyncio.run(collector.start_session(source))
    assert landed.wait(timeout=5.0)

    result = collector.cast()
    assert result.impact is True
    assert result.sample_count >= 3
    assert source.listener_count == 0
    assert source._reader is None

    source.close()
    assert source.ser is None
