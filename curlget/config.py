"""
Runtime settings computed once at start-up
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .clock import DEFAULT_REDRAW_INTERVAL_MS

PROGRAM_NAME = "curlget"
VERSION = "1.0"
USER_AGENT = f"{PROGRAM_NAME}/{VERSION}"

DEFAULT_CHUNK_SIZE = 16384
DEFAULT_CONNECT_TIMEOUT = 30
DEFAULT_LOG_LEVEL = "WARNING"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TerminalConfig:
    """What the controlling terminal supports, detected once"""
    enhanced: bool = False

    @classmethod
    def detect(cls, environ: Optional[Mapping[str, str]] = None) -> "TerminalConfig":
        """
        Detect terminal capabilities

        Args:
            environ: Environment to inspect (defaults to os.environ)

        Returns:
            TerminalConfig: Windows Terminal sessions export WT_SESSION
        """
        if environ is None:
            environ = os.environ
        return cls(enhanced="WT_SESSION" in environ)


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring {name}={raw!r}: must be positive, using {default}")
        return default
    return value


@dataclass(frozen=True)
class Settings:
    user_agent: str = USER_AGENT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    redraw_interval_ms: int = DEFAULT_REDRAW_INTERVAL_MS
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL
    terminal: TerminalConfig = field(default_factory=TerminalConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from CURLGET_* environment variables

        Args:
            environ: Environment to read (defaults to os.environ)

        Returns:
            Settings: Defaults for anything unset or invalid
        """
        if environ is None:
            environ = os.environ
        return cls(
            chunk_size=_int_setting(environ, "CURLGET_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            redraw_interval_ms=_int_setting(
                environ, "CURLGET_REDRAW_INTERVAL_MS", DEFAULT_REDRAW_INTERVAL_MS
            ),
            connect_timeout=_int_setting(
                environ, "CURLGET_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT
            ),
            log_level=environ.get("CURLGET_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            terminal=TerminalConfig.detect(environ),
        )
