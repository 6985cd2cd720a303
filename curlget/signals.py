"""
Cancellation Signal Bridge turning interrupt signals into a cooperative flag
"""
import logging
import signal
import sys
import threading
from typing import Dict, Optional, TextIO

from .spinner import TabSpinner

logger = logging.getLogger(__name__)

SIGNAL_NAMES = {
    signal.SIGINT: "Ctrl-C",
}
if hasattr(signal, "SIGBREAK"):
    SIGNAL_NAMES[signal.SIGBREAK] = "Ctrl-Break"


class CancellationToken:
    """Set once by the signal bridge, polled by the transfer loop between chunks"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class CancellationBridge:
    def __init__(self, token: CancellationToken, spinner: Optional[TabSpinner] = None,
                 stream: Optional[TextIO] = None):
        """
        Initialize the bridge

        Args:
            token: Token set when an interrupt arrives
            spinner: Cosmetic indicator stopped when an interrupt arrives
            stream: Where the abort message goes (defaults to sys.stderr)
        """
        self.token = token
        self.spinner = spinner
        self.stream = stream if stream is not None else sys.stderr
        self._previous: Dict[int, object] = {}

    def handle(self, signum, frame=None) -> None:
        """
        Signal handler: only flips the token and cleans up the indicator.

        The stream and sink stay with the transfer loop. A second interrupt
        while cancellation is pending raises KeyboardInterrupt so a stalled
        read cannot hold the process.
        """
        if self.token.cancelled:
            raise KeyboardInterrupt

        self.token.cancel()
        if self.spinner is not None:
            self.spinner.stop()
        name = SIGNAL_NAMES.get(signum, f"signal {signum}")
        self.stream.write(f"\nKeyboard interrupt received ({name}). Download aborted.\n\n")
        self.stream.flush()

    def install(self) -> None:
        for signum in SIGNAL_NAMES:
            self._previous[signum] = signal.signal(signum, self.handle)
        logger.debug(f"Installed cancellation handlers for {sorted(SIGNAL_NAMES.values())}")

    def restore(self) -> None:
        for signum, previous in self._previous.items():
            # None means the previous handler was not installed from Python
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()

    def __enter__(self) -> "CancellationBridge":
        self.install()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()
