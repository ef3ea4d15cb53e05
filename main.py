#!/usr/bin/env python3
"""
Laser Turntable Scanner - Main Application Entry Point

Connects to the scanner over serial, sweeps one turntable revolution
capturing ambient/left/right frames at every position, then indexes the
scan directory and optionally dumps laser-stripe images.

Author: Scanner System Development
Created: October 2026
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from camera.capture import make_capture
from core.config_manager import ConfigManager
from core.exceptions import FrameWriteError, ScannerSystemError
from core.logging_setup import setup_logging, setup_simple_logging
from device.session import DeviceSession
from processing.stripes import StripeExtractor
from scanning.sequencer import ScanSequencer
from storage.image_set import ImageSet

logger = logging.getLogger(__name__)


class ScannerApplication:
    """Main application class for the scanner system"""

    def __init__(self, config: ConfigManager):
        self.config = config
        self.scan_config = config.get_scan_config()
        self.camera_config = config.get_camera_config()

    def scan(self) -> List[str]:
        """Run one full-revolution scan into the configured data directory"""
        data_dir = self.scan_config.data_dir
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FrameWriteError(f"Cannot create scan directory {data_dir}: {e}", module="scanning") from e

        with DeviceSession.open(self.config.get_serial_port(),
                                self.camera_config.device,
                                config=self.config,
                                capture=make_capture(self.camera_config)) as session:
            sequencer = ScanSequencer(session)
            paths = sequencer.run(self.scan_config.file_root, self.scan_config.increment)
            logger.info(f"Protocol statistics: {session.protocol.get_statistics()}")
        return paths

    def index(self) -> ImageSet:
        data_dir = self.scan_config.data_dir
        logger.info(f"Processing scan dir '{data_dir}'...")
        image_set = ImageSet.build(data_dir)
        for position, entry in image_set.complete_entries():
            logger.info(f"image {position:04x}: {entry.left}")
        return image_set

    def dump_stripes(self, image_set: ImageSet, out_dir: Path) -> List[Path]:
        logger.info("Dumping subtractive images")
        extractor = StripeExtractor(resolution=self.camera_config.resolution)
        return extractor.dump(image_set, out_dir)

    def run(self, skip_scan: bool = False, stripes_dir: Optional[Path] = None) -> ImageSet:
        if not skip_scan:
            self.scan()
        image_set = self.index()
        if stripes_dir is not None:
            self.dump_stripes(image_set, stripes_dir)
        return image_set


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Laser turntable 3D scanner")
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file (default: built-in defaults)"
    )
    parser.add_argument(
        "--serial",
        help="Serial device of the scanner (default: /dev/ttyACM0)"
    )
    parser.add_argument(
        "--video",
        help="Video device of the camera (default: /dev/video1)"
    )
    parser.add_argument(
        "--scan-data",
        help="Directory for the raw scan files (default: ./scan-data/)"
    )
    parser.add_argument(
        "--increment",
        type=int,
        help="Turntable units between positions (default: 64)"
    )
    parser.add_argument(
        "--skip-scan",
        action="store_true",
        help="Bypass the physical scan and use the data left by the last one"
    )
    parser.add_argument(
        "--dump-stripes",
        type=Path,
        metavar="DIR",
        help="Write laser stripe images for every complete position to DIR"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from configuration)"
    )
    return parser


def load_config(args: argparse.Namespace) -> ConfigManager:
    config = ConfigManager(args.config) if args.config else ConfigManager.defaults()

    overrides = {
        'device.serial_port': args.serial,
        'camera.device': args.video,
        'scan.data_dir': args.scan_data,
        'scan.increment': args.increment,
        'system.log_level': args.log_level,
    }
    for path, value in overrides.items():
        if value is not None:
            config.set(path, value)
    config.validate()
    return config


def abort(error: BaseException) -> int:
    print(f"FATAL: {error}\nExiting.", file=sys.stderr)
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ScannerSystemError as e:
        return abort(e)

    log_level = config.get('system.log_level')
    log_dir = config.get('system.log_dir')
    if log_dir:
        setup_logging(log_level, log_dir=Path(log_dir))
    else:
        setup_simple_logging(log_level)

    try:
        ScannerApplication(config).run(skip_scan=args.skip_scan, stripes_dir=args.dump_stripes)
    except ScannerSystemError as e:
        logger.error(f"Scanner failed: {e}")
        return abort(e)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
