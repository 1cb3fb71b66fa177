"""Tests for the findmy-bridge CLI."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from findmy_bridge.cli import _format_timestamp, cmd_check, create_parser, run_cli


def bridge_handler(devices=None, status: int = 200):
    """Build a MockTransport handler that answers like a running bridge."""

    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status, json={"status": status})
        if request.url.path == "/health":
            data = {"helper_connected": True, "friends": 1}
        elif request.url.path.endswith("/friends"):
            data = [
                {
                    "handle": "alice@icloud.com",
                    "status": "live",
                    "coordinates": [37.7749, -122.4194],
                    "last_updated": 1700000000000,
                }
            ]
        else:
            data = devices
        return httpx.Response(200, json={"status": 200, "message": "ok", "data": data})

    return handler


@pytest.fixture
def mock_bridge(monkeypatch):
    """Route httpx.Client through a MockTransport built from a handler."""
    real_client = httpx.Client

    def install(handler) -> None:
        def factory(**kwargs):
            return real_client(transport=httpx.MockTransport(handler), **kwargs)

        monkeypatch.setattr(httpx, "Client", factory)

    return install


class TestParser:
    """Tests for argument parsing."""

    def test_serve_options(self):
        args = create_parser().parse_args(["serve", "--port", "8080", "-v"])
        assert args.command == "serve"
        assert args.port == 8080
        assert args.verbose is True

    def test_check_defaults(self):
        args = create_parser().parse_args(["check"])
        assert args.url == "http://127.0.0.1:1234"
        assert args.timeout == 10.0

    def test_devices_dir(self):
        args = create_parser().parse_args(["devices", "--dir", "/tmp/findmy"])
        assert args.dir == Path("/tmp/findmy")

    def test_no_command_prints_help(self, capsys):
        assert run_cli([]) == 0
        assert "findmy-bridge" in capsys.readouterr().out


class TestFormatTimestamp:
    def test_epoch_ms(self):
        assert _format_timestamp(1700000000000) == "2023-11-14 22:13:20"

    def test_missing(self):
        assert _format_timestamp(None) == "-"
        assert _format_timestamp(0) == "-"


class TestDevicesCommand:
    """Tests for 'findmy-bridge devices'."""

    def test_lists_devices(self, tmp_path: Path, capsys):
        (tmp_path / "Devices.data").write_text(
            json.dumps([{"id": "d1", "name": "iPhone", "modelDisplayName": "iPhone 15"}])
        )
        (tmp_path / "Items.data").write_text(
            json.dumps([{"identifier": "i1", "name": "Keys", "productType": {"type": "b389"}}])
        )

        result = run_cli(["devices", "--dir", str(tmp_path)])

        assert result == 0
        output = capsys.readouterr().out
        assert "iPhone 15" in output
        assert "AirTag" in output
        assert "Total: 2 device(s)" in output

    def test_empty(self, tmp_path: Path, capsys):
        (tmp_path / "Devices.data").write_text("[]")

        assert run_cli(["devices", "--dir", str(tmp_path)]) == 0
        assert "No devices found." in capsys.readouterr().out

    def test_unreadable(self, tmp_path: Path, capsys):
        (tmp_path / "Items.data").write_bytes(b"bplist00")

        assert run_cli(["devices", "--dir", str(tmp_path)]) == 1
        assert "No readable Find My cache files" in capsys.readouterr().out

    def test_uses_configured_dir(self, tmp_path: Path, capsys):
        (tmp_path / "Devices.data").write_text("[]")
        config = MagicMock(findmy_dir=tmp_path)

        with patch("findmy_bridge.cli.load_config", return_value=config):
            assert run_cli(["devices"]) == 0


class TestCheckCommand:
    """Tests for 'findmy-bridge check'."""

    def test_summary(self, mock_bridge, capsys):
        mock_bridge(bridge_handler(devices=[{"id": "d1"}, {"id": "d2"}]))

        assert run_cli(["check"]) == 0

        output = capsys.readouterr().out
        assert "Helper connected: yes" in output
        assert "Friends: 1" in output
        assert "alice@icloud.com" in output
        assert "Devices: 2" in output

    def test_devices_unavailable(self, mock_bridge, capsys):
        mock_bridge(bridge_handler(devices=None))

        assert run_cli(["check"]) == 0
        assert "Devices: unavailable" in capsys.readouterr().out

    def test_http_error(self, mock_bridge, capsys):
        mock_bridge(bridge_handler(status=500))

        assert run_cli(["check"]) == 1
        assert "returned HTTP 500" in capsys.readouterr().out

    def test_unreachable(self, mock_bridge, capsys):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        mock_bridge(refuse)
        args = create_parser().parse_args(["check", "--url", "http://127.0.0.1:9"])

        assert cmd_check(args) == 1
        assert "could not reach http://127.0.0.1:9" in capsys.readouterr().out


class TestServeCommand:
    def test_runs_uvicorn_with_config(self, tmp_path: Path):
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps(
                {"findmy_dir": str(tmp_path), "log_dir": str(tmp_path / "logs"), "helper_port": 45670}
            )
        )

        with patch("uvicorn.run") as run:
            result = run_cli(["serve", "--config", str(config_path), "--port", "9999"])

        assert result == 0
        _, kwargs = run.call_args
        assert kwargs["port"] == 9999
        assert kwargs["host"] == "127.0.0.1"
