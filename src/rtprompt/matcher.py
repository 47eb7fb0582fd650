"""Closest-match selection callback.

``ClosestMatch`` is configured with candidate titles (plus optional
secondary text used only for ranking) and produces a :data:`Callback`
for :class:`~rtprompt.prompt.Prompt` that lists the closest candidates
beneath the prompt, lets Tab cycle through them, and reports the choice
on Enter.

Example::

    picker = ClosestMatch(issues, on_select=chosen.append, max_shown=7)
    Prompt("Summary: ", picker.callback()).wait()
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable

from rtprompt.fuzzy import rank_candidates
from rtprompt.pipeline import Callback

DEFAULT_INSTRUCTIONS = "Use <TAB> and <ENTER> to select from below. Otherwise press <ENTER> when ready"
NO_MATCHES = "(no matches)"


def _blue(text: str) -> str:
    return f"\x1b[34m{text}\x1b[39m"


def _bright_black(text: str) -> str:
    return f"\x1b[90m{text}\x1b[39m"


@dataclass
class MatcherTheme:
    selected: Callable[[str], str] = _blue
    instructions: Callable[[str], str] = _bright_black


@dataclass(frozen=True)
class Candidate:
    title: str
    secondary: str = ""

    @property
    def search_text(self) -> str:
        if not self.secondary:
            return self.title
        return f"{self.title} {self.secondary}"


class ClosestMatch:
    """Configuration for a closest-match picker.

    *data* maps titles (shown on screen) to optional secondary text that
    only influences ranking, e.g. ticket titles mapped to their summaries.
    *on_select* receives the selected title on Enter, or the raw typed
    text when nothing was selected with Tab.
    """

    def __init__(
        self,
        data: Mapping[str, str | None],
        on_select: Callable[[str], None],
        *,
        max_shown: int = 7,
        instructions: str | None = None,
        show_instructions: bool = False,
        theme: MatcherTheme | None = None,
    ) -> None:
        if max_shown < 0:
            raise ValueError(f"max_shown must be non-negative, got {max_shown}")
        self.candidates = [Candidate(title, secondary or "") for title, secondary in data.items()]
        self.on_select = on_select
        self.max_shown = max_shown
        self.instructions = instructions or DEFAULT_INSTRUCTIONS
        self.show_instructions = show_instructions
        self.theme = theme or MatcherTheme()

    def callback(self) -> Callback:
        """Return a fresh callback with its own ranking and selection state."""
        return Matcher(self)


class Matcher:
    """Stateful callback produced by :meth:`ClosestMatch.callback`.

    Owns the currently shown candidates and the selection index between
    invocations. Invocations must not overlap, which the prompt's callback
    pipeline guarantees.
    """

    def __init__(self, config: ClosestMatch) -> None:
        self.config = config
        self.shown: list[Candidate] = config.candidates[: config.max_shown]
        self.selected = -1

    def __call__(self, text: str, tab: bool, enter: bool) -> str:
        if enter:
            choice = text
            if 0 <= self.selected < len(self.shown):
                choice = self.shown[self.selected].title
            self.config.on_select(choice)
            return ""

        if tab:
            self._cycle()
        else:
            self.selected = -1

        if not self.config.candidates:
            return ""

        if not text:
            self.shown = self.config.candidates[: self.config.max_shown]
        elif not tab:
            self.shown = rank_candidates(
                self.config.candidates,
                text,
                lambda c: c.search_text,
                self.config.max_shown,
            )
        return self._render()

    def _cycle(self) -> None:
        if not self.shown:
            self.selected = -1
        elif self.selected < len(self.shown) - 1:
            self.selected += 1
        else:
            self.selected = 0

    def _render(self) -> str:
        theme = self.config.theme
        lines: list[str] = []
        if self.config.show_instructions:
            lines.append(theme.instructions(self.config.instructions))
        for index, candidate in enumerate(self.shown):
            if index == self.selected:
                lines.append(f"{theme.selected(candidate.title)} (selected)")
            else:
                lines.append(candidate.title)
        if not self.shown:
            # An empty string would leave the previous list on screen
            lines.append(theme.instructions(NO_MATCHES))
        return "".join(f"{line}\n" for line in lines)
