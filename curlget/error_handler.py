"""
Error Handler component reporting failures to the user and the log
"""
import logging
import sys
from typing import Optional, TextIO

from .config import DEFAULT_LOG_LEVEL, USER_AGENT
from .errors import DownloadError, SizeMismatch, UnsupportedProtocol


class ErrorHandler:
    def __init__(self, user_agent: str = USER_AGENT, stream: Optional[TextIO] = None,
                 log_level: str = DEFAULT_LOG_LEVEL):
        """
        Initialize the Error Handler

        Args:
            user_agent (str): Prefix for user-facing messages
            stream: Where messages go (defaults to sys.stderr)
            log_level (str): Root logging level name
        """
        self.user_agent = user_agent
        self.stream = stream if stream is not None else sys.stderr
        self.logger = logging.getLogger(__name__)
        self._setup_logging(log_level)

    def format_error(self, error: DownloadError) -> str:
        """
        Build the user-facing text for an error

        Args:
            error (DownloadError): The error to describe

        Returns:
            str: One or more lines, without a trailing newline
        """
        if isinstance(error, UnsupportedProtocol):
            lines = ["Please explicitly specify a supported protocol:"]
            lines.extend(f" - {candidate}" for candidate in error.candidates)
            return "\n".join(lines)

        if isinstance(error, SizeMismatch) or (error.code is None and error.description is None):
            return f"{self.user_agent}: {error.message}"

        if error.description:
            text = f"{self.user_agent}: {error.message} {error.description}"
            if error.code is not None:
                text += f"\n({error.operation}, error {error.code})"
            return text

        return f"{self.user_agent}: {error.message} {error.operation}, error {error.code}"

    def report(self, error: DownloadError) -> None:
        """
        Tell the user about an error and record it in the log

        Args:
            error (DownloadError): The error that ended the download
        """
        self.stream.write(self.format_error(error) + "\n")
        self.stream.flush()
        self.logger.debug(f"{type(error).__name__}: {error.message}", exc_info=error)

    def _setup_logging(self, log_level: str) -> None:
        """Setup logging configuration"""
        level = getattr(logging, str(log_level).upper(), None)
        if not isinstance(level, int):
            level = logging.WARNING
        logging.basicConfig(
            level=level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
