"""Tests for the command-line interface.

WHY: The CLI is how caption files get debugged outside a player. Its
output must match what the engine would actually do.

HOW: main() is called with explicit argv; stdout and stderr are read
with capsys. Caption files are written to tmp_path. The fetch command
runs against an httpx.MockTransport.

RULES:
- Results on stdout, status on stderr
- Errors exit with status 1
"""

import json

import httpx
import pytest

from silence_skipper import cli
from silence_skipper.sources import TimedTextClient


@pytest.fixture
def write_json(tmp_path):
    def write(payload, name="captions.json"):
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    return write


class TestParser:
    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_simulate_flags(self):
        args = cli.build_parser().parse_args([
            "simulate", "c.json", "--skip-after-seek", "--no-skip-cc-captions",
            "--min-skip", "0.5", "--log-level", "debug",
        ])
        assert args.skip_after_seek is True
        assert args.skip_cc_captions is False
        assert args.min_skip == 0.5
        assert args.log_level == "debug"

    def test_simulate_flags_default_to_none(self):
        args = cli.build_parser().parse_args(["simulate", "c.json"])
        assert args.skip_after_seek is None
        assert args.pre_speech_offset is None


class TestEstimateCommand:
    def test_prints_estimates(self, capsys):
        cli.main(["estimate", "cat", "elephant"])
        assert capsys.readouterr().out == "cat\t500.0 ms\nelephant\t787.5 ms\n"

    def test_verbose_details(self, capsys):
        cli.main(["estimate", "ねこ", "--language", "ja", "-v"])
        out = capsys.readouterr().out
        assert out.startswith("ねこ\t600.0 ms\n")
        assert "mora: 2" in out

    def test_unsupported_language(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["estimate", "bonjour", "--language", "fr"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestZonesCommand:
    def test_lists_zones(self, capsys, write_json, auto_three_words):
        cli.main(["zones", write_json(auto_three_words)])
        captured = capsys.readouterr()
        lines = captured.out.splitlines()
        assert len(lines) == 2
        assert "cat → dog" in lines[0]
        assert "dog → bird" in lines[1]
        assert "2 skip zones, 4.00 s of silence" in captured.err

    def test_manual_track(self, capsys, write_json, manual_two_events):
        cli.main(["zones", write_json(manual_two_events)])
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Manual captions: 2 events" in captured.err

    def test_malformed_payload(self, write_json):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["zones", write_json({"events": "x"})])
        assert exc_info.value.code == 1

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            cli.main(["zones", str(tmp_path / "missing.json")])
        assert "File not found" in capsys.readouterr().err


class TestSimulateCommand:
    def test_manual_simulation(self, capsys, write_json, manual_two_events):
        cli.main(["simulate", write_json(manual_two_events)])
        captured = capsys.readouterr()
        assert "Skipped 1 gap(s), 2.00 s of 5.00 s" in captured.out
        assert "Skipped 2.00 s, now at 3.00 s." in captured.err

    def test_auto_simulation(self, capsys, write_json, auto_three_words):
        cli.main(["simulate", write_json(auto_three_words), "--duration", "7"])
        out = capsys.readouterr().out
        assert "Skipped 2 gap(s), 4.00 s of 7.00 s" in out

    def test_min_skip_flag(self, capsys, write_json, manual_two_events):
        cli.main(["simulate", write_json(manual_two_events), "--min-skip", "3"])
        assert "Skipped 0 gap(s)" in capsys.readouterr().out

    def test_nothing_to_simulate(self, write_json):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["simulate", write_json({"events": []})])
        assert exc_info.value.code == 1


class TestFetchCommand:
    def test_fetch_to_file(self, monkeypatch, tmp_path, capsys):
        payload = {"events": [{"tStartMs": 0, "segs": [{"utf8": "hi"}]}]}
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=payload)

        monkeypatch.setattr(
            cli, "TimedTextClient",
            lambda: TimedTextClient(transport=httpx.MockTransport(handler)),
        )
        output = tmp_path / "out.json"
        cli.main([
            "fetch", "https://x.test/api/timedtext?v=1&lang=ko&tlang=en",
            "--output", str(output),
        ])
        assert json.loads(output.read_text(encoding="utf-8")) == payload
        assert "tlang" not in str(requests[0].url)
        assert "Language: ko" in capsys.readouterr().err

    def test_fetch_failure(self, monkeypatch):
        monkeypatch.setattr(
            cli, "TimedTextClient",
            lambda: TimedTextClient(
                transport=httpx.MockTransport(lambda request: httpx.Response(403)),
            ),
        )
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["fetch", "https://x.test/api/timedtext?v=1&lang=en"])
        assert exc_info.value.code == 1
