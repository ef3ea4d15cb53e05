"""
Scanner device session: turntable motion, lasers and capture timing.
"""

from device.session import DeviceSession

__all__ = ['DeviceSession']
