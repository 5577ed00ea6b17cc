"""
Live sensor connection modules.

Each module inherits from MotionSource and pushes MotionEvent objects to
its subscribers. Requires pyserial.
"""

from .serial_source import SerialMotionSource, parse_line

__all__ = [
    "SerialMotionSource",
    "parse_line",
]
