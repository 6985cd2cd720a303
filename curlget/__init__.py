"""
curlget: download one URL to the current directory with a live progress line
"""
from .config import VERSION as __version__
from .download_manager import DownloadManager
from .engine import TransferLoop, TransferPhase, TransferResult, TransferState
from .errors import DownloadError
from .renderer import ProgressLineRenderer
from .remote import CurlStream, open_remote

__all__ = [
    "DownloadManager",
    "TransferLoop",
    "TransferPhase",
    "TransferResult",
    "TransferState",
    "DownloadError",
    "ProgressLineRenderer",
    "CurlStream",
    "open_remote",
]
