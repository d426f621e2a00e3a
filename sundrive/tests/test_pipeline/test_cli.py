"""Tests for CLI commands."""

import io
import json
from pathlib import Path

import httpx
import respx

from sundrive.cli import main

API = "https://api.sunrise-sunset.org/json"


def _write_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "test.yaml"
    config_path.write_text(
        "location:\n  provider: fixed\n  latitude: 41.65\n  longitude: -0.88\n"
    )
    return config_path


class TestCLI:
    def test_no_command_returns_1(self, capsys):
        assert main([]) == 1

    def test_encode(self, capsys):
        assert main(["encode", "1:05:00 PM"]) == 0
        assert capsys.readouterr().out.strip() == "785"

    def test_config_show(self, tmp_path: Path, capsys):
        result = main(["--config", str(tmp_path / "none.yaml"), "config", "show"])
        assert result == 0
        assert "twilight_cache" in capsys.readouterr().out

    def test_config_set_persists(self, tmp_path: Path, capsys):
        config_path = tmp_path / "test.yaml"
        result = main(["--config", str(config_path), "config", "set", "device.test_mode=true"])
        assert result == 0
        assert "True" in capsys.readouterr().out
        assert "test_mode: true" in config_path.read_text()

    def test_config_set_bad_format(self, tmp_path: Path, capsys):
        result = main(["--config", str(tmp_path / "t.yaml"), "config", "set", "device.test_mode"])
        assert result == 1

    def test_cache_show_empty(self, tmp_path: Path, capsys):
        result = main(["--config", str(tmp_path / "t.yaml"), "--db", str(tmp_path / "t.db"), "cache", "show"])
        assert result == 0
        assert "empty" in capsys.readouterr().out

    @respx.mock
    def test_refresh_then_cached(self, tmp_path: Path, capsys, zaragoza_response: dict):
        route = respx.get(API).mock(return_value=httpx.Response(200, json=zaragoza_response))
        args = ["--config", str(_write_config(tmp_path)), "--db", str(tmp_path / "t.db")]

        assert main(args + ["refresh", "--tz", "UTC+1"]) == 0
        out = capsys.readouterr().out
        assert '"sunrise": 448' in out
        assert route.call_count == 1
        assert route.calls[0].request.url.params["tzid"] == "Etc/GMT+1"

        assert main(args + ["refresh", "--tz", "UTC+1"]) == 0
        assert "cache hit: True" in capsys.readouterr().out
        assert route.call_count == 1

        assert main(args + ["cache", "show", "--tz", "UTC+1"]) == 0
        assert "Valid today for Etc/GMT+1: True" in capsys.readouterr().out

    @respx.mock
    def test_refresh_aborted(self, tmp_path: Path, capsys):
        respx.get(API).mock(return_value=httpx.Response(500))
        args = ["--config", str(_write_config(tmp_path)), "--db", str(tmp_path / "t.db")]
        assert main(args + ["refresh", "--tz", "UTC"]) == 1
        assert "aborted" in capsys.readouterr().out

    @respx.mock
    def test_serve(self, tmp_path: Path, monkeypatch, capsys, zaragoza_response: dict):
        respx.get(API).mock(return_value=httpx.Response(200, json=zaragoza_response))
        monkeypatch.setattr("sys.stdin", io.StringIO('{"timezone_string": "UTC+1"}\n'))
        args = ["--config", str(_write_config(tmp_path)), "--db", str(tmp_path / "t.db")]

        assert main(args + ["serve"]) == 0

        sent = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        assert sent[1] == {"js_ready": 1}
        assert sent[2]["sunrise"] == 448
