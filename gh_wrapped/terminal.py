"""Terminal input and the slideshow loop.

read_key() puts the terminal in raw mode for a single key press and returns
a normalized key name, so the Slideshow state machine never sees escape
sequences. run_slideshow() redraws slides with rich.live.Live until a final
action is chosen.
"""

import logging
import os
import sys
from typing import Callable, Optional

from rich.console import Console
from rich.live import Live

from .models import ComparisonStats, WrappedStats
from .slides import FINAL_ACTIONS, QUIT, Slideshow

logger = logging.getLogger(__name__)

ESCAPE_SEQUENCES = {
    "[A": "up",
    "[B": "down",
    "[C": "right",
    "[D": "left",
    "OA": "up",
    "OB": "down",
    "OC": "right",
    "OD": "left",
}

# msvcrt reports arrow keys as a prefix byte followed by a scan code
WINDOWS_SCAN_CODES = {"H": "up", "P": "down", "M": "right", "K": "left"}

CTRL_C = "\x03"


def normalize_key(ch: str) -> str:
    """Map a single raw character to a key name."""
    if ch in ("\r", "\n"):
        return "enter"
    if ch == "\x1b":
        return "esc"
    if ch == CTRL_C:
        raise KeyboardInterrupt
    return ch


def _read_key_posix() -> str:
    import select
    import termios
    import tty

    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ch = os.read(fd, 1).decode(errors="ignore")
        if ch != "\x1b":
            return normalize_key(ch)
        # A lone ESC has nothing queued behind it
        ready, _, _ = select.select([fd], [], [], 0.05)
        if not ready:
            return "esc"
        sequence = os.read(fd, 2).decode(errors="ignore")
        return ESCAPE_SEQUENCES.get(sequence, "esc")
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


def _read_key_windows() -> str:
    import msvcrt

    ch = msvcrt.getwch()
    if ch in ("\x00", "\xe0"):
        return WINDOWS_SCAN_CODES.get(msvcrt.getwch(), "")
    return normalize_key(ch)


def read_key() -> str:
    """Block until a key is pressed and return its name.

    Returns:
        "left", "right", "up", "down", "enter", "esc", or the character

    Raises:
        KeyboardInterrupt: On Ctrl+C
    """
    if os.name == "nt":
        return _read_key_windows()
    return _read_key_posix()


def run_slideshow(
    stats: WrappedStats,
    comparison: Optional[ComparisonStats] = None,
    console: Optional[Console] = None,
    key_reader: Callable[[], str] = read_key,
) -> str:
    """Show the slides until the user picks an action on the export slide or quits.

    Args:
        stats: Stats to present
        comparison: Optional year-over-year comparison slide
        console: Console to draw on (default: a new Console)
        key_reader: Function returning the next key name

    Returns:
        The final action (quit, export_png, export_svg, export_json,
        share_twitter or share_linkedin)
    """
    console = console or Console()
    show = Slideshow(stats, comparison)

    with Live(show.render(), console=console, screen=True, auto_refresh=False) as live:
        while True:
            try:
                key = key_reader()
            except (KeyboardInterrupt, EOFError):
                return QUIT
            action = show.handle_key(key)
            logger.debug("key=%r action=%s slide=%d", key, action, show.index)
            if action in FINAL_ACTIONS:
                return action
            live.update(show.render(), refresh=True)
