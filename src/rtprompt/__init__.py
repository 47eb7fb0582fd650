"""rtprompt: realtime single-line terminal prompt with live output beneath it."""

import logging

# Configuration
from rtprompt.config import PromptConfig

# Fuzzy ranking
from rtprompt.fuzzy import FuzzyMatch, fuzzy_match, rank_candidates

# Keybindings
from rtprompt.keybindings import DEFAULT_KEYBINDINGS, Keybindings, PromptAction

# Keyboard input handling
from rtprompt.keys import Key, KeyEvent, KeyId, parse_key

# Line editing
from rtprompt.line_buffer import LineBuffer

# Closest-match picker
from rtprompt.matcher import ClosestMatch, Matcher, MatcherTheme

# Callback pipeline
from rtprompt.pipeline import Callback, CallbackInvocation, CallbackPipeline, CallbackResult

# Session
from rtprompt.prompt import Prompt, PromptState

# Rendering
from rtprompt.renderer import Renderer
from rtprompt.router import KeyRouter, RouteResult

# Input buffering
from rtprompt.stdin_buffer import StdinBuffer

# Terminal interface and implementation
from rtprompt.terminal import ProcessTerminal, Terminal, TerminalModeError

# Utilities
from rtprompt.utils import truncate_to_width, visible_width

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Config
    "PromptConfig",
    # Fuzzy
    "FuzzyMatch",
    "fuzzy_match",
    "rank_candidates",
    # Keybindings
    "DEFAULT_KEYBINDINGS",
    "Keybindings",
    "PromptAction",
    # Keys
    "Key",
    "KeyEvent",
    "KeyId",
    "parse_key",
    # Line buffer
    "LineBuffer",
    # Matcher
    "ClosestMatch",
    "Matcher",
    "MatcherTheme",
    # Pipeline
    "Callback",
    "CallbackInvocation",
    "CallbackPipeline",
    "CallbackResult",
    # Session
    "Prompt",
    "PromptState",
    # Rendering
    "Renderer",
    "KeyRouter",
    "RouteResult",
    # Stdin buffer
    "StdinBuffer",
    # Terminal
    "ProcessTerminal",
    "Terminal",
    "TerminalModeError",
    # Utilities
    "truncate_to_width",
    "visible_width",
]
