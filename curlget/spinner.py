"""
Terminal tab activity indicator
"""
import sys
from typing import Optional, TextIO

from .config import TerminalConfig

# ConEmu/Windows Terminal progress sequences: OSC 9;4;<state>[;<percent>] ST
TAB_INDETERMINATE = "\x1b]9;4;3\x1b\\"
TAB_CLEAR = "\x1b]9;4;0\x1b\\"


def tab_progress(percent: int) -> str:
    percent = min(100, max(0, int(percent)))
    return f"\x1b]9;4;1;{percent}\x1b\\"


class TabSpinner:
    """Shows a busy indicator in the terminal tab; a no-op outside enhanced terminals"""

    def __init__(self, terminal: TerminalConfig, stream: Optional[TextIO] = None):
        self.terminal = terminal
        self.stream = stream if stream is not None else sys.stdout
        self.active = False

    def _emit(self, sequence: str) -> None:
        if not self.terminal.enhanced:
            return
        self.stream.write(sequence)
        self.stream.flush()

    def start(self) -> None:
        self._emit(TAB_INDETERMINATE)
        self.active = True

    def update(self, percent: int) -> None:
        self._emit(tab_progress(percent))
        self.active = True

    def stop(self) -> None:
        # Only a flag and one write, safe to call from a signal handler
        if self.active:
            self._emit(TAB_CLEAR)
        self.active = False
