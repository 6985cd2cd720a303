"""
Main Download Manager class that coordinates all components
"""
import logging
import sys
import time
from contextlib import closing
from typing import Callable, Optional, TextIO

from .clock import TransferClock, local_timestamp
from .config import Settings
from .engine import TransferLoop, TransferPhase, TransferResult
from .error_handler import ErrorHandler
from .errors import DownloadError, OverwriteDeclined, SizeMismatch
from .filesystem import FileSystemManager
from .remote import open_remote
from .renderer import ProgressLineRenderer
from .signals import CancellationBridge, CancellationToken
from .spinner import TabSpinner
from .units import DurationStyle, format_duration, format_size
from .urls import derive_filename, validate_protocol


class DownloadManager:
    def __init__(self, settings: Optional[Settings] = None,
                 stream: Optional[TextIO] = None,
                 filesystem: Optional[FileSystemManager] = None,
                 error_handler: Optional[ErrorHandler] = None,
                 spinner: Optional[TabSpinner] = None,
                 opener: Callable = open_remote,
                 clock_factory: Optional[Callable[[], TransferClock]] = None,
                 now: Callable[[], float] = time.time):
        """
        Initialize the Download Manager with its core components

        Args:
            settings (Settings, optional): Runtime settings; read from the environment if omitted
            stream: Where progress and status messages go (defaults to sys.stderr)
            filesystem (FileSystemManager, optional): Destination file handling
            error_handler (ErrorHandler, optional): Error reporting
            spinner (TabSpinner, optional): Terminal tab indicator
            opener: Callable returning an open remote stream for a URL
            clock_factory: Builds the clock for the transfer loop
            now: Unix time source for fallback filenames
        """
        self.settings = settings if settings is not None else Settings.from_env()
        self.stream = stream if stream is not None else sys.stderr
        self.error_handler = error_handler or ErrorHandler(
            self.settings.user_agent, self.stream, self.settings.log_level
        )
        self.filesystem = filesystem or FileSystemManager(prompt_output=self.stream)
        self.spinner = spinner or TabSpinner(self.settings.terminal)
        self.renderer = ProgressLineRenderer(self.stream, self.settings.terminal, self.spinner)
        self.opener = opener
        self.clock_factory = clock_factory or (
            lambda: TransferClock(self.settings.redraw_interval_ms)
        )
        self.now = now
        self.logger = logging.getLogger(__name__)

    def download(self, url: str) -> TransferResult:
        """
        Download url into the working directory

        Args:
            url (str): URL with an explicit https://, http:// or ftp:// prefix

        Returns:
            TransferResult: How the transfer ended

        Raises:
            DownloadError: If the download could not be set up; already reported
        """
        try:
            return self._download(url)
        except DownloadError as e:
            self.error_handler.report(e)
            raise
        finally:
            self.spinner.stop()

    def _download(self, url: str) -> TransferResult:
        validate_protocol(url)
        ua = self.settings.user_agent
        token = CancellationToken()

        self.spinner.start()
        with CancellationBridge(token, self.spinner, self.stream):
            remote = self.opener(
                url,
                user_agent=ua,
                buffer_size=self.settings.chunk_size,
                connect_timeout=self.settings.connect_timeout,
                cancel_token=token,
            )

        with closing(remote):
            if token.cancelled:
                return TransferResult(TransferPhase.CANCELLED, 0, 0, 0.0)

            self._say(f"{ua}: Network connection established...\n\n")
            self._say(f"Opening Source URL [{url}]\n")

            file_name, generated = derive_filename(url, self.now())
            if generated:
                self._say(
                    f"Destination File [{file_name}] "
                    f"(no filename provided by server, using default)\n\n"
                )
            else:
                self._say(f"Destination File [{file_name}]\n\n")

            if self.filesystem.exists(file_name):
                self.spinner.stop()
                if not self.filesystem.confirm_overwrite(file_name):
                    raise OverwriteDeclined(f"Not overwriting '{file_name}'.")
                self.spinner.start()
                self._say("\n")

            total_bytes = remote.total_bytes
            with self.filesystem.create_destination(file_name) as sink:
                self._say(f"[{local_timestamp()}] Download Started.\n")
                loop = TransferLoop(
                    self.renderer,
                    clock=self.clock_factory(),
                    chunk_size=self.settings.chunk_size,
                    cancel_token=token,
                )
                with CancellationBridge(token, self.spinner, self.stream):
                    result = loop.run(remote, sink, total_bytes)

        self._announce(result)
        return result

    def _announce(self, result: TransferResult) -> None:
        stamp = local_timestamp()
        if result.phase is TransferPhase.COMPLETED:
            took = format_duration(int(result.elapsed_seconds), DurationStyle.NARRATIVE)
            self._say(
                f"\n[{stamp}] Download Completed.\n"
                f"Downloaded {format_size(result.bytes_transferred)} in {took}.\n\n"
            )
        elif isinstance(result.error, SizeMismatch):
            self._say(f"\n[{stamp}] Download Failed.\n{result.error.message}\n\n")
        elif result.error is not None:
            self.error_handler.report(result.error)
        else:
            self.logger.info(f"Download cancelled after {result.bytes_transferred} bytes")

    def _say(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()
