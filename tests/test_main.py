"""
Test Application Entry Point

Runs the CLI in --skip-scan mode against a prepared scan directory, and
the full scan path with the device layer patched out.
"""

import logging
from unittest.mock import patch

import numpy as np
import pytest

import main
from core.exceptions import DeviceIdentityError
from conftest import FakeTransport, StubCamera
from device.session import DeviceSession


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(main, "setup_simple_logging", lambda level: logging.getLogger())
    for var in ('SCANNER_SERIAL_PORT', 'SCANNER_VIDEO_DEVICE', 'SCANNER_LOG_LEVEL', 'SCANNER_DATA_DIR'):
        monkeypatch.delenv(var, raising=False)


def write_triplet(directory, position, kinds="NLR", resolution=(4, 2)):
    size = resolution[0] * resolution[1] * 2
    for kind in kinds:
        (directory / f"scan{position:04x}{kind}.yuv").write_bytes(np.zeros(size, np.uint8).tobytes())


class TestSkipScan:

    def test_indexes_existing_data(self, tmp_path, caplog):
        write_triplet(tmp_path, 0)
        write_triplet(tmp_path, 0x40)
        write_triplet(tmp_path, 0x80, kinds="NL")

        with caplog.at_level(logging.INFO):
            code = main.main(["--skip-scan", "--scan-data", str(tmp_path)])

        assert code == 0
        assert "complete': 2" in caplog.text
        assert "incomplete': 1" in caplog.text

    def test_missing_directory_is_fatal(self, tmp_path, capsys):
        code = main.main(["--skip-scan", "--scan-data", str(tmp_path / "nothing")])
        assert code == 1
        err = capsys.readouterr().err
        assert err.startswith("FATAL: ")
        assert "Exiting." in err

    def test_dump_stripes(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("camera:\n  resolution: [4, 2]\n")
        scan_dir = tmp_path / "scan"
        scan_dir.mkdir()
        write_triplet(scan_dir, 0)

        code = main.main(["--config", str(config), "--skip-scan", "--scan-data", str(scan_dir),
                          "--dump-stripes", str(tmp_path / "out")])

        assert code == 0
        assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["stripe0000L.png", "stripe0000R.png"]

    def test_truncated_frame_is_skipped_when_dumping(self, tmp_path, caplog):
        config = tmp_path / "config.yaml"
        config.write_text("camera:\n  resolution: [4, 2]\n")
        scan_dir = tmp_path / "scan"
        scan_dir.mkdir()
        write_triplet(scan_dir, 0)
        write_triplet(scan_dir, 0x40)
        # cut short by an aborted capture
        (scan_dir / "scan0000R.yuv").write_bytes(b"\x00" * 5)

        with caplog.at_level(logging.WARNING):
            code = main.main(["--config", str(config), "--skip-scan", "--scan-data", str(scan_dir),
                              "--dump-stripes", str(tmp_path / "out")])

        assert code == 0
        assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["stripe0040L.png", "stripe0040R.png"]
        assert "scan0000R.yuv" in caplog.text

    def test_invalid_override_is_fatal(self, tmp_path, capsys):
        code = main.main(["--skip-scan", "--scan-data", str(tmp_path), "--increment", "0"])
        assert code == 1
        assert "FATAL" in capsys.readouterr().err


class TestScan:

    def test_scan_then_index(self, tmp_path, no_sleep):
        transport = FakeTransport([b"OK\n"] * 2 + [b"OK\n"] * 4 + [b"OK\n"] * 5)

        def fake_open(port_name, camera_path, config=None, capture=None):
            assert port_name == "/dev/ttyUSB7"
            assert camera_path == "/dev/video4"
            return DeviceSession.connect(transport, camera_path, StubCamera(), config.get_device_config())

        with patch.object(main.DeviceSession, "open", side_effect=fake_open):
            code = main.main(["--serial", "/dev/ttyUSB7", "--video", "/dev/video4",
                              "--scan-data", str(tmp_path / "data"), "--increment", "4096"])

        assert code == 0
        assert len(list((tmp_path / "data").iterdir())) == 6
        assert transport.closed

    def test_unusable_data_dir_is_fatal(self, tmp_path, capsys):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        with patch.object(main.DeviceSession, "open") as mock_open:
            code = main.main(["--scan-data", str(blocker)])

        assert code == 1
        err = capsys.readouterr().err
        assert err.startswith("FATAL: Cannot create scan directory")
        mock_open.assert_not_called()

    def test_foreign_device_is_fatal(self, tmp_path, capsys):
        with patch.object(main.DeviceSession, "open", side_effect=DeviceIdentityError()):
            code = main.main(["--scan-data", str(tmp_path)])
        assert code == 1
        assert "not a laser turntable scanner" in capsys.readouterr().err
