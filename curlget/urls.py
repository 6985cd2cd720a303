"""
URL checks and destination filename derivation
"""
import time
from typing import List, Optional

from .config import PROGRAM_NAME
from .errors import MalformedUrl, UnsupportedProtocol

SUPPORTED_PROTOCOLS = ("https://", "http://", "ftp://")
SCHEME_DELIMITER = "://"


def protocol_candidates(url: str) -> List[str]:
    """Every supported form of url, built from whatever follows an existing '://'"""
    tail = url
    position = url.find(SCHEME_DELIMITER)
    if position != -1:
        tail = url[position + len(SCHEME_DELIMITER):]
    return [f"{protocol}{tail}" for protocol in SUPPORTED_PROTOCOLS]


def validate_protocol(url: str) -> str:
    """
    Require an explicit https://, http:// or ftp:// prefix

    Raises:
        UnsupportedProtocol: Carrying the candidate URLs to suggest
    """
    if url.startswith(SUPPORTED_PROTOCOLS):
        return url
    raise UnsupportedProtocol(url, protocol_candidates(url))


def fallback_filename(now: Optional[float] = None) -> str:
    if now is None:
        now = time.time()
    return f"{PROGRAM_NAME}_{int(now)}"


def derive_filename(url: str, now: Optional[float] = None):
    """
    Pick the local filename for url

    Args:
        url (str): Validated URL
        now (float, optional): Unix time for the fallback name

    Returns:
        tuple: (filename, True if the fallback name was used)

    Raises:
        MalformedUrl: If url has no '://'
    """
    position = url.find(SCHEME_DELIMITER)
    if position == -1:
        raise MalformedUrl("Malformed URL.", operation="derive_filename")

    path = url[position + len(SCHEME_DELIMITER):]
    slash = path.rfind("/")
    if slash == -1 or slash == len(path) - 1:
        return fallback_filename(now), True
    return path[slash + 1:], False
