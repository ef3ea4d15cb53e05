"""
Configuration Manager for Scanner System

Handles loading, validation, and management of system configuration
from YAML files. Provides type-safe access to configuration values
with validation and default fallbacks.

The timing constants and laser wiring tags are properties of a specific
hardware build, so they live here rather than in the protocol code.

Author: Scanner System Development
Created: October 2026
"""

import copy
import os
import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union
from dataclasses import dataclass, field

from .exceptions import (
    ConfigurationError,
    ConfigurationNotFoundError,
    ConfigurationValidationError
)
from .types import Side

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'system': {
        'log_level': 'INFO',
        'log_dir': None,
    },
    'device': {
        'serial_port': '/dev/ttyACM0',
        'baudrate': 115200,
        'laser_timeout_ms': 5,
        'motion_ms_per_unit': 10,
        'motion_base_ms': 10,
        'settle_ms': 50,
        'poll_ms': 1,
        'wiring': {
            'left': 'r',
            'right': 'l',
        },
    },
    'camera': {
        'device': '/dev/video1',
        'resolution': [1280, 1024],
        'fourcc': 'YUYV',
        'frame_interval': [2, 15],  # 7.5 fps
    },
    'scan': {
        'data_dir': './scan-data/',
        'file_prefix': 'scan',
        'increment': 64,
    },
}


@dataclass
class DeviceTimings:
    """Hardware-tuned timing and wiring for the device session"""
    laser_timeout_ms: int = 5
    motion_ms_per_unit: int = 10
    motion_base_ms: int = 10
    settle_ms: int = 50
    poll_ms: int = 1
    wiring: Dict[Side, str] = field(default_factory=lambda: {Side.LEFT: 'r', Side.RIGHT: 'l'})
    baudrate: int = 115200

    def motion_timeout_ms(self, offset: int) -> int:
        """Larger moves are allowed proportionally more time"""
        return abs(offset) * self.motion_ms_per_unit + self.motion_base_ms


@dataclass
class CameraConfig:
    """Configuration for the capture device"""
    device: str
    resolution: tuple
    fourcc: str
    frame_interval: tuple

    @property
    def fps(self) -> float:
        numerator, denominator = self.frame_interval
        return denominator / numerator

    @property
    def frame_size(self) -> int:
        """Bytes in one YUYV frame (2 bytes per pixel)"""
        width, height = self.resolution
        return width * height * 2


@dataclass
class ScanConfig:
    """Configuration for a scanning run"""
    data_dir: Path
    file_prefix: str
    increment: int

    @property
    def file_root(self) -> str:
        return str(self.data_dir / self.file_prefix)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class ConfigManager:
    """
    Centralized configuration management for scanner system

    Features:
    - YAML configuration file loading over built-in defaults
    - Type-safe configuration access
    - Configuration validation
    - Environment variable overrides
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        self.config_file = Path(config_file) if config_file is not None else None
        self._config_data: Dict[str, Any] = {}
        self._validated = False

        self.reload()

    @classmethod
    def defaults(cls) -> 'ConfigManager':
        """Configuration built from defaults and environment only"""
        return cls(None)

    def reload(self) -> bool:
        """
        Reload configuration from file

        Returns:
            True if reload successful
        """
        data = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_file is not None:
            if not self.config_file.exists():
                raise ConfigurationNotFoundError(
                    f"Configuration file not found: {self.config_file}"
                )
            try:
                with open(self.config_file, 'r', encoding='utf-8') as file:
                    loaded = yaml.safe_load(file) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_file}: {e}") from e
            except OSError as e:
                raise ConfigurationError(f"Failed to load configuration: {e}") from e

            if not isinstance(loaded, dict):
                raise ConfigurationError(f"Top level of {self.config_file} must be a mapping")
            _deep_merge(data, loaded)

        self._config_data = data
        self._validated = False

        self._apply_env_overrides()
        self.validate()

        if self.config_file is not None:
            logger.info(f"Configuration loaded from {self.config_file}")
        return True

    def _apply_env_overrides(self):
        """Apply environment variable overrides to configuration"""
        env_mappings = {
            'SCANNER_SERIAL_PORT': 'device.serial_port',
            'SCANNER_VIDEO_DEVICE': 'camera.device',
            'SCANNER_LOG_LEVEL': 'system.log_level',
            'SCANNER_DATA_DIR': 'scan.data_dir',
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                self.set(config_path, env_value)
                logger.debug(f"Applied environment override: {config_path} = {env_value}")

    def set(self, path: str, value: Any):
        """Set a nested configuration value using dot notation"""
        keys = path.split('.')
        current = self._config_data

        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value
        self._validated = False

    def validate(self) -> bool:
        """
        Validate configuration values

        Raises:
            ConfigurationValidationError: If validation fails
        """
        self._validate_system_config()
        self._validate_device_config()
        self._validate_camera_config()
        self._validate_scan_config()

        self._validated = True
        logger.debug("Configuration validation successful")
        return True

    def _validate_system_config(self):
        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        log_level = str(self.get('system.log_level', '')).upper()
        if log_level not in valid_log_levels:
            raise ConfigurationValidationError(
                f"Invalid log level '{log_level}'. Must be one of: {valid_log_levels}"
            )

    def _validate_device_config(self):
        device = self.get('device', {})

        if not device.get('serial_port'):
            raise ConfigurationValidationError("Serial port not specified")

        for name in ('laser_timeout_ms', 'motion_ms_per_unit', 'motion_base_ms', 'settle_ms'):
            value = device.get(name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ConfigurationValidationError(
                    f"device.{name} must be a non-negative integer, got {value!r}"
                )

        poll_ms = device.get('poll_ms')
        if not isinstance(poll_ms, int) or isinstance(poll_ms, bool) or poll_ms < 1:
            raise ConfigurationValidationError(f"device.poll_ms must be >= 1, got {poll_ms!r}")

        wiring = device.get('wiring', {})
        tags = []
        for side in ('left', 'right'):
            tag = wiring.get(side)
            if not isinstance(tag, str) or len(tag) != 1:
                raise ConfigurationValidationError(
                    f"device.wiring.{side} must be a single character, got {tag!r}"
                )
            tags.append(tag)
        if tags[0] == tags[1]:
            raise ConfigurationValidationError("Left and right lasers must use distinct wiring tags")

    def _validate_camera_config(self):
        camera = self.get('camera', {})

        resolution = camera.get('resolution')
        if not isinstance(resolution, (list, tuple)) or len(resolution) != 2:
            raise ConfigurationValidationError("camera.resolution must be [width, height]")
        if any(not isinstance(v, int) or v <= 0 for v in resolution):
            raise ConfigurationValidationError(f"Invalid camera resolution {resolution}")

        fourcc = camera.get('fourcc')
        if not isinstance(fourcc, str) or len(fourcc) != 4:
            raise ConfigurationValidationError(f"camera.fourcc must be 4 characters, got {fourcc!r}")

        interval = camera.get('frame_interval')
        if not isinstance(interval, (list, tuple)) or len(interval) != 2 or 0 in interval:
            raise ConfigurationValidationError("camera.frame_interval must be [numerator, denominator]")

    def _validate_scan_config(self):
        increment = self.get('scan.increment')
        try:
            increment = int(increment)
        except (TypeError, ValueError):
            raise ConfigurationValidationError(f"scan.increment must be an integer, got {increment!r}")
        if increment <= 0:
            raise ConfigurationValidationError(f"scan.increment must be positive, got {increment}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation

        Args:
            key: Configuration key in dot notation (e.g., 'device.serial_port')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        try:
            value = self._config_data
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_device_config(self) -> DeviceTimings:
        """Get typed device timing and wiring configuration"""
        device = self.get('device')
        return DeviceTimings(
            laser_timeout_ms=int(device['laser_timeout_ms']),
            motion_ms_per_unit=int(device['motion_ms_per_unit']),
            motion_base_ms=int(device['motion_base_ms']),
            settle_ms=int(device['settle_ms']),
            poll_ms=int(device['poll_ms']),
            wiring={
                Side.LEFT: device['wiring']['left'],
                Side.RIGHT: device['wiring']['right'],
            },
            baudrate=int(device['baudrate']),
        )

    def get_camera_config(self) -> CameraConfig:
        """Get typed camera configuration"""
        camera = self.get('camera')
        return CameraConfig(
            device=str(camera['device']),
            resolution=tuple(camera['resolution']),
            fourcc=camera['fourcc'],
            frame_interval=tuple(camera['frame_interval']),
        )

    def get_scan_config(self) -> ScanConfig:
        """Get typed scan configuration"""
        scan = self.get('scan')
        return ScanConfig(
            data_dir=Path(scan['data_dir']),
            file_prefix=str(scan['file_prefix']),
            increment=int(scan['increment']),
        )

    def get_serial_port(self) -> str:
        return self.get('device.serial_port')

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration summary for logging/debugging"""
        return {
            'config_file': str(self.config_file) if self.config_file else None,
            'validated': self._validated,
            'log_level': self.get('system.log_level'),
            'serial_port': self.get_serial_port(),
            'camera_device': self.get('camera.device'),
            'data_dir': self.get('scan.data_dir'),
            'increment': self.get('scan.increment'),
        }
