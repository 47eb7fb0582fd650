"""CLI entry point for rtprompt. Uses Click for argument parsing."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from rtprompt.config import PromptConfig
from rtprompt.matcher import ClosestMatch
from rtprompt.prompt import Prompt
from rtprompt.terminal import TerminalModeError

SAMPLE_ISSUES: dict[str, str] = {
    "[#1011] LSPs too optimized": "",
    "[#1112] Dry runs too dry": "",
    "[#1213] All hands on deck": "",
    "[#1314] Leak in the Enterprise": "",
    "[#1415] Exception thrown during cardio": "",
    "[#1516] Panic when frying eggs": "",
    "[#1617] Frying eggs when panicking": "",
    "[#1618] Nothing to report, just lonely": "",
    "[#1619] Bloody onions when expecting uncontaminated ones": "",
}


def load_candidates(path: Path) -> dict[str, str]:
    """Read candidates from *path*: one per line, ``title<TAB>secondary``."""
    candidates: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        title, _, secondary = line.partition("\t")
        candidates[title.strip()] = secondary.strip()
    return candidates


def _pick(prefix: str, candidates: dict[str, str], config: PromptConfig, max_shown: int) -> str:
    """Run a closest-match prompt and return what the user picked."""
    selected: list[str] = []
    picker = ClosestMatch(
        candidates,
        on_select=selected.append,
        max_shown=max_shown,
        show_instructions=True,
    )
    try:
        Prompt(prefix, picker.callback(), config=config).wait()
    except TerminalModeError as exc:
        raise click.ClickException(str(exc)) from exc
    except KeyboardInterrupt:
        sys.exit(130)
    return selected[-1] if selected else ""


@click.group(invoke_without_command=True)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write debug logs to this file")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="debug",
    help="Log level for --log-file",
)
@click.pass_context
def main(ctx, log_file, log_level):
    """Realtime terminal prompt with live output beneath the input."""
    if log_file:
        # Never log to stderr: it shares the screen with the raw-mode prompt
        logging.basicConfig(
            filename=log_file,
            level=getattr(logging, log_level.upper()),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command("demo")
@click.option("--empty", is_flag=True, help="Start with no candidates")
@click.option("--max-shown", type=int, default=7, show_default=True, help="Candidates to list")
@click.option("--padding", type=int, default=None, help="Blank rows between prompt and output")
@click.option("--debug", is_flag=True, help="Show text and cursor position under the output")
def demo(empty, max_shown, padding, debug):
    """Pick one of a few sample issues."""
    config = _config(padding, debug)
    selected = _pick("Summary: ", {} if empty else dict(SAMPLE_ISSUES), config, max_shown)
    click.echo(f"Woohoo! You selected: {selected}")


@main.command("choose")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--prefix", default="> ", show_default=True, help="Prompt text")
@click.option("--max-shown", type=int, default=7, show_default=True, help="Candidates to list")
@click.option("--padding", type=int, default=None, help="Blank rows between prompt and output")
def choose(file, prefix, max_shown, padding):
    """Pick a line of FILE (title, optional TAB, ranking text)."""
    candidates = load_candidates(file)
    click.echo(_pick(prefix, candidates, _config(padding, False), max_shown))


def _config(padding: int | None, debug: bool) -> PromptConfig:
    overrides: dict[str, object] = {}
    if padding is not None:
        overrides["padding"] = padding
    if debug:
        overrides["debug"] = True
    try:
        return PromptConfig.from_env(**overrides)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


if __name__ == "__main__":
    main()
