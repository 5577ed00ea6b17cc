# data/live/serial_source.py
import logging
import re
import threading
import time

import serial

from opele.data.models import AxisReading, MotionEvent
from opele.data.source import MotionSource

logger = logging.getLogger(__name__)

G = 9.81  # m/s²

LINE_REGEX = re.compile(
    r"ACCEL \(g\):\s+"
    r"X=(?P<ax>-?\d+\.?\d*)\s+"
    r"Y=(?P<ay>-?\d+\.?\d*)\s+"
    r"Z=(?P<az>-?\d+\.?\d*)"
)

# Gravity-excluded acceleration, printed after a separator
LINEAR_REGEX = re.compile(
    r"LINEAR \(g\):\s+"
    r"X=(?P<lx>-?\d+\.?\d*)\s+"
    r"Y=(?P<ly>-?\d+\.?\d*)\s+"
    r"Z=(?P<lz>-?\d+\.?\d*)"
)


def parse_line(line, interval=None):
    """
    Parse one Arduino line into a MotionEvent, or None if it isn't a reading.

    A line without a LINEAR block yields an event with no user vector,
    which the collector discards.
    """
    match = LINE_REGEX.search(line)
    if not match:
        return None

    # Arduino outputs in g → convert to m/s²
    raw = AxisReading(
        x=float(match.group("ax")) * G,
        y=float(match.group("ay")) * G,
        z=float(match.group("az")) * G,
    )

    user = None
    linear = LINEAR_REGEX.search(line)
    if linear:
        user = AxisReading(
            x=float(linear.group("lx")) * G,
            y=float(linear.group("ly")) * G,
            z=float(linear.group("lz")) * G,
        )

    return MotionEvent(acceleration_including_gravity=raw, acceleration=user, interval=interval)


class SerialMotionSource(MotionSource):
    """
    Accelerometer on a serial port (e.g. Arduino + MPU-6050).

    A reader thread runs while at least one listener is subscribed.
    """

    def __init__(self, port, baudrate=9600, timeout=1.0, reset_delay=2.0):
        super().__init__()
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.reset_delay = reset_delay
        self.ser = None
        self._reader = None
        self._stop = threading.Event()
        self._last_read = None

    def is_available(self):
        if self.ser is not None:
            return True
        try:
            self.connect()
        except serial.SerialException as e:
            logger.warning("Could not open %s: %s", self.port, e)
            return False
        return True

    def connect(self):
        self.ser = serial.Serial(self.port, self.baudrate, timeout=self.timeout)
        time.sleep(self.reset_delay)  # Arduino reset on macOS
        self.ser.reset_input_buffer()

    def disconnect(self):
        self._stop_reader()
        if self.ser:
            self.ser.close()
            self.ser = None

    def read(self):
        """Read and parse one line; None if the line is not a reading."""
        line = self.ser.readline().decode(errors="ignore")
        now = time.monotonic()
        interval = now - self._last_read if self._last_read is not None else None
        self._last_read = now
        return parse_line(line, interval=interval)

    def poll(self):
        """Read one line and dispatch it to listeners. Returns the event or None."""
        event = self.read()
        if event is not None:
            self._dispatch(event)
        return event

    def _on_listeners_changed(self):
        if self.listener_count and self._reader is None:
            self._start_reader()
        elif not self.listener_count and self._reader is not None:
            self._stop_reader()

    def _start_reader(self):
        if self.ser is None:
            self.connect()
        self._stop.clear()
        self._last_read = None
        self._reader = threading.Thread(target=self._run, name=f"serial-{self.port}", daemon=True)
        self._reader.start()

    def _stop_reader(self):
        reader = self._reader
        self._reader = None
        self._stop.set()
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=self.timeout * 2)

    def _run(self):
        while not self._stop.is_set():
            try:
                self.poll()
            except serial.SerialException as e:
                logger.error("Serial read failed on %s: %s", self.port, e)
                break

    def close(self):
        super().close()
        self.disconnect()
