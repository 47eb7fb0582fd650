"""Tests for the rtprompt command line."""

from __future__ import annotations

from click.testing import CliRunner

from rtprompt import cli
from rtprompt.cli import load_candidates, main
from rtprompt.terminal import TerminalModeError


class TestLoadCandidates:
    def test_titles_and_secondary_text(self, tmp_path) -> None:
        path = tmp_path / "issues.txt"
        path.write_text("First issue\tmore detail\n\n  \nSecond issue\n", encoding="utf-8")
        assert load_candidates(path) == {"First issue": "more detail", "Second issue": ""}


class TestCommands:
    def test_help(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "demo" in result.output
        assert "choose" in result.output

    def test_no_command_prints_help(self) -> None:
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_demo_reports_selection(self, monkeypatch) -> None:
        captured = {}

        def fake_pick(prefix, candidates, config, max_shown):
            captured.update(prefix=prefix, count=len(candidates), padding=config.padding, max_shown=max_shown)
            return "[#1516] Panic when frying eggs"

        monkeypatch.setattr(cli, "_pick", fake_pick)
        result = CliRunner().invoke(main, ["demo", "--padding", "0", "--max-shown", "3"])
        assert result.exit_code == 0
        assert "Woohoo! You selected: [#1516] Panic when frying eggs" in result.output
        assert captured == {"prefix": "Summary: ", "count": 9, "padding": 0, "max_shown": 3}

    def test_demo_empty(self, monkeypatch) -> None:
        counts = []
        monkeypatch.setattr(cli, "_pick", lambda p, c, cfg, m: counts.append(len(c)) or "")
        CliRunner().invoke(main, ["demo", "--empty"])
        assert counts == [0]

    def test_bad_padding(self) -> None:
        result = CliRunner().invoke(main, ["demo", "--padding", "-1"])
        assert result.exit_code == 2

    def test_choose(self, monkeypatch, tmp_path) -> None:
        path = tmp_path / "items.txt"
        path.write_text("alpha\nbeta\n", encoding="utf-8")
        monkeypatch.setattr(cli, "_pick", lambda p, c, cfg, m: sorted(c)[1])
        result = CliRunner().invoke(main, ["choose", str(path)])
        assert result.exit_code == 0
        assert result.output.strip() == "beta"

    def test_raw_mode_failure_is_reported(self, monkeypatch) -> None:
        class FailingPrompt:
            def __init__(self, *args, **kwargs) -> None:
                pass

            def wait(self) -> str:
                raise TerminalModeError("cannot switch terminal to raw mode: not a tty")

        monkeypatch.setattr(cli, "Prompt", FailingPrompt)
        result = CliRunner().invoke(main, ["demo"])
        assert result.exit_code == 1
        assert "not a tty" in result.output

    def test_keyboard_interrupt_exits_130(self, monkeypatch) -> None:
        class InterruptedPrompt:
            def __init__(self, *args, **kwargs) -> None:
                pass

            def wait(self) -> str:
                raise KeyboardInterrupt

        monkeypatch.setattr(cli, "Prompt", InterruptedPrompt)
        result = CliRunner().invoke(main, ["demo"])
        assert result.exit_code == 130
