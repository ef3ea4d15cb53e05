"""
Custom Exception Classes for Scanner System

Defines hierarchical exception classes for the failure modes of the
turntable scanner: serial transport failures, protocol-level rejections
from the device, device misidentification, camera capture failures and
filesystem errors around scan files.

Author: Scanner System Development
Created: October 2026
"""

from typing import Optional


class ScannerSystemError(Exception):
    """Base exception for all scanner system errors"""

    def __init__(self, message: str, error_code: Optional[str] = None, module: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        self.module = module
        super().__init__(self.message)

    def __str__(self):
        parts = [self.message]
        if self.module:
            parts.append(f"Module: {self.module}")
        if self.error_code:
            parts.append(f"Code: {self.error_code}")
        return " | ".join(parts)


# Configuration Errors
class ConfigurationError(ScannerSystemError):
    """Raised when configuration is invalid or missing"""
    pass


class ConfigurationNotFoundError(ConfigurationError):
    """Raised when configuration file is not found"""
    pass


class ConfigurationValidationError(ConfigurationError):
    """Raised when configuration values are invalid"""
    pass


# Serial Link Errors
class TransportError(ScannerSystemError):
    """I/O failure on the serial link. Always fatal to the current session."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message, error_code=error_code, module="transport")


class TransportClosedError(TransportError):
    """Raised when the stream reports end-of-stream (device disappeared)"""
    pass


class ProtocolError(ScannerSystemError):
    """
    The device answered, but not with the success token.

    The raw response line is kept verbatim in ``response`` (without the
    trailing newline) and is never re-parsed.
    """

    def __init__(self, message: str, response: bytes = b"", error_code: Optional[str] = None):
        super().__init__(message, error_code=error_code, module="protocol")
        self.response = response


class ProtocolTimeoutError(ProtocolError):
    """Raised when no complete response line arrives within the timeout"""

    def __init__(self, timeout_ms: int, response: bytes = b""):
        super().__init__(f"Timeout after {timeout_ms} ms", response=response, error_code="TIMEOUT")
        self.timeout_ms = timeout_ms


class DeviceIdentityError(ScannerSystemError):
    """Raised when the handshake reaches a device that is not the scanner"""

    def __init__(self, message: str = "Device is not a laser turntable scanner"):
        super().__init__(message, error_code="IDENTITY", module="device")


# Camera Errors
class CameraCaptureError(ScannerSystemError):
    """Raised when the capture device cannot be opened, configured or read"""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message, error_code=error_code, module="camera")


# Storage and Data Errors
class IoError(ScannerSystemError):
    """Base class for filesystem errors around scan files"""
    pass


class FrameWriteError(IoError):
    """Raised when a captured frame cannot be written to disk"""
    pass


class ImageSetError(IoError):
    """Raised when the scan directory cannot be enumerated"""
    pass


class FrameFormatError(IoError):
    """Raised when a frame file does not hold exactly one frame (e.g. cut short by an aborted scan)"""
    pass


# Orchestration Errors
class ScanExecutionError(ScannerSystemError):
    """Raised when the scan sequencer is driven through an invalid transition"""
    pass


# Convenient aliases for common usage
ScannerError = ScannerSystemError
