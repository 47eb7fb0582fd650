"""Configuration for a prompt session."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from rtprompt.keybindings import KeybindingsConfig


@dataclass
class PromptConfig:
    """Prompt session settings.

    ``padding`` is the number of blank rows between the prompt line and the
    callback output. ``escape_timeout`` is how long (seconds) a lone ESC
    waits for a following byte before it counts as the Escape key.
    """

    padding: int = 2
    debug: bool = False
    clear_on_exit: bool = True
    truncate_lines: bool = True
    escape_timeout: float = 0.01
    keybindings: KeybindingsConfig = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.padding < 0:
            raise ValueError(f"padding must be non-negative, got {self.padding}")
        if self.escape_timeout < 0:
            raise ValueError(f"escape_timeout must be non-negative, got {self.escape_timeout}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> PromptConfig:
        """Build a config from ``RTPROMPT_*`` environment variables.

        Keyword *overrides* take precedence over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        padding = env.get("RTPROMPT_PADDING")
        if padding:
            try:
                values["padding"] = int(padding)
            except ValueError:
                raise ValueError(f"RTPROMPT_PADDING must be an integer, got {padding!r}") from None
        if env.get("RTPROMPT_DEBUG") == "1":
            values["debug"] = True
        if env.get("RTPROMPT_CLEAR_ON_EXIT") == "0":
            values["clear_on_exit"] = False

        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]
