"""
Test Serial Transport

Uses mocking to avoid requiring an actual serial device.
"""

from unittest.mock import MagicMock, patch

import pytest
import serial

from communication.transport import SerialTransport
from core.exceptions import TransportClosedError, TransportError


@pytest.fixture
def port():
    mock_port = MagicMock()
    mock_port.is_open = True
    mock_port.in_waiting = 0
    mock_port.port = '/dev/ttyACM0'
    return mock_port


class TestSerialTransport:

    @patch('serial.Serial')
    def test_open_configures_port(self, mock_serial_class):
        transport = SerialTransport.open('/dev/ttyACM0', 115200)

        assert transport.port is mock_serial_class.return_value
        kwargs = mock_serial_class.call_args.kwargs
        assert kwargs['port'] == '/dev/ttyACM0'
        assert kwargs['baudrate'] == 115200
        assert kwargs['timeout'] == 0

    @patch('serial.Serial')
    def test_open_failure(self, mock_serial_class):
        mock_serial_class.side_effect = serial.SerialException("Port not found")
        with pytest.raises(TransportError):
            SerialTransport.open('/dev/ttyACM9')

    def test_read_available_reads_what_is_waiting(self, port):
        port.in_waiting = 3
        port.read.return_value = b"OK\n"
        assert SerialTransport(port).read_available() == b"OK\n"
        port.read.assert_called_once_with(3)

    def test_read_available_blocks_for_one_byte_when_idle(self, port):
        port.read.return_value = b""
        assert SerialTransport(port).read_available() == b""
        port.read.assert_called_once_with(1)

    def test_vanished_device_is_closed_error(self, port):
        port.read.side_effect = serial.SerialException(
            "device reports readiness to read but returned no data")
        with pytest.raises(TransportClosedError):
            SerialTransport(port).read_available()

    def test_closed_port(self, port):
        port.is_open = False
        with pytest.raises(TransportClosedError):
            SerialTransport(port).write(b"+1\n")

    def test_write_returns_count(self, port):
        port.write.return_value = 2
        assert SerialTransport(port).write(b"+1\n") == 2

    def test_write_timeout_is_fatal(self, port):
        port.write.side_effect = serial.SerialTimeoutException("Write timeout")
        with pytest.raises(TransportError):
            SerialTransport(port).write(b"+1\n")

    def test_set_timeout(self, port):
        SerialTransport(port).set_timeout(0.001)
        assert port.timeout == 0.001

    def test_close(self, port):
        SerialTransport(port).close()
        port.close.assert_called_once()
