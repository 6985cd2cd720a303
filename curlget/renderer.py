"""
Progress Line Renderer writing a single self-overwriting status line
"""
import sys
from typing import Optional, TextIO

from tqdm.utils import disp_len

from .config import TerminalConfig
from .spinner import TabSpinner


class ProgressLineRenderer:
    def __init__(self, stream: Optional[TextIO] = None,
                 terminal: Optional[TerminalConfig] = None,
                 spinner: Optional[TabSpinner] = None):
        """
        Initialize the renderer

        Args:
            stream: Where the status line goes (defaults to sys.stderr)
            terminal: Terminal capabilities detected at start-up
            spinner: Tab indicator that receives the percentage in enhanced terminals
        """
        self.stream = stream if stream is not None else sys.stderr
        self.terminal = terminal if terminal is not None else TerminalConfig()
        self.spinner = spinner

    @staticmethod
    def compose(state, size_str: str, rate_str: str,
                total_str: Optional[str] = None, eta_str: Optional[str] = None) -> str:
        """Build the status line text, without the leading carriage return"""
        if state.total_known:
            line = (
                f"Total Size: {total_str} / Downloaded: {size_str} "
                f"[{state.bytes_transferred} / {state.total_bytes}] - {rate_str}"
            )
            if eta_str is not None:
                line += f" - ETA {eta_str}"
            return line
        return (
            f"Total Size: unknown / Downloaded: {size_str} "
            f"[{state.bytes_transferred}] - {rate_str}"
        )

    def render(self, state, size_str: str, rate_str: str,
               total_str: Optional[str] = None, eta_str: Optional[str] = None) -> int:
        """
        Redraw the status line in place

        Args:
            state: TransferState being reported
            size_str (str): Formatted bytes transferred so far
            rate_str (str): Formatted average rate
            total_str (str, optional): Formatted total size, when known
            eta_str (str, optional): Formatted time remaining, when known

        Returns:
            int: Display width of the line just written
        """
        line = self.compose(state, size_str, rate_str, total_str, eta_str)
        length = disp_len(line)

        padding = ""
        if length < state.last_rendered_length:
            padding = " " * (state.last_rendered_length - length)

        self.stream.write(f"\r{line}{padding}")
        self.stream.flush()

        if self.terminal.enhanced and self.spinner is not None and state.total_known:
            self.spinner.update(state.bytes_transferred * 100 // state.total_bytes)

        return length

    def finish(self) -> None:
        """Move past the status line"""
        self.stream.write("\n")
        self.stream.flush()
