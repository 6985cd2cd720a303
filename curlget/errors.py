"""
Error kinds raised while setting up or running a download
"""
from typing import Optional


class DownloadError(Exception):
    """Base class for every terminal, non-retried download failure"""

    def __init__(self, message: str, code: Optional[int] = None,
                 description: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.description = description
        self.operation = operation

    @classmethod
    def from_os_error(cls, message: str, error: OSError, operation: str) -> "DownloadError":
        return cls(message, code=error.errno, description=error.strerror, operation=operation)

    @classmethod
    def from_curl_error(cls, message: str, error: Exception, operation: str) -> "DownloadError":
        """Build from a pycurl.error, whose args are (code, message)"""
        code, description = None, None
        if len(error.args) >= 2:
            code, description = error.args[0], error.args[1]
        elif error.args:
            description = str(error.args[0])
        return cls(message, code=code, description=description or None, operation=operation)


class ConnectionOpenFailed(DownloadError):
    pass


class StreamOpenFailed(DownloadError):
    pass


class StreamReadFailed(DownloadError):
    pass


class MalformedUrl(DownloadError):
    pass


class UnsupportedProtocol(DownloadError):
    def __init__(self, url: str, candidates):
        super().__init__(f"Unsupported or missing protocol in {url!r}")
        self.url = url
        self.candidates = list(candidates)


class DestinationCreateFailed(DownloadError):
    pass


class OverwriteDeclined(DownloadError):
    pass


class WriteFailed(DownloadError):
    pass


class SizeMismatch(DownloadError):
    def __init__(self, expected: int, received: int):
        super().__init__(f"Expected {expected} bytes, got {received} bytes.")
        self.expected = expected
        self.received = received
