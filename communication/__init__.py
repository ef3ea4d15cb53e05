"""
Serial communication with the scanner firmware: byte transport and the
line-based command protocol.
"""

from communication.protocol import LineProtocol, encode_laser, encode_motion, SUCCESS_TOKEN
from communication.transport import SerialTransport, Transport

__all__ = [
    'LineProtocol',
    'SerialTransport',
    'Transport',
    'encode_laser',
    'encode_motion',
    'SUCCESS_TOKEN',
]
