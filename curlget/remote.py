"""
Remote stream backed by libcurl, read in chunks by the transfer loop
"""
import logging
from typing import Optional
from urllib.parse import quote

import certifi
import pycurl

from .config import DEFAULT_CHUNK_SIZE, DEFAULT_CONNECT_TIMEOUT, USER_AGENT
from .errors import ConnectionOpenFailed, StreamOpenFailed, StreamReadFailed
from .signals import CancellationToken

# Reserved characters left as-is; anything else outside unreserved ASCII is percent-encoded as UTF-8
URL_SAFE_CHARS = ":/?#[]@!$&'()*+,;=%~"

SELECT_TIMEOUT = 1.0  # seconds; bounds how long a cancel goes unnoticed
MAX_REDIRECTS = 5


def quote_url(url: str) -> str:
    """Percent-encode characters libcurl cannot take as-is (non-ASCII, spaces)"""
    return quote(url, safe=URL_SAFE_CHARS)


class CurlStream:
    """
    Pull-style reader over a libcurl easy handle driven by a multi handle.

    libcurl pushes data through a write callback; the callback pauses the
    transfer once a chunk is buffered and read() resumes it, so at most about
    one chunk is held in memory at a time. There is no read timeout: a peer
    that stops sending blocks read() until the transfer is cancelled.
    """

    def __init__(self, url: str, user_agent: str = USER_AGENT,
                 buffer_size: int = DEFAULT_CHUNK_SIZE,
                 connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
                 cancel_token: Optional[CancellationToken] = None):
        self.url = url
        self.user_agent = user_agent
        self.buffer_size = buffer_size
        self.connect_timeout = connect_timeout
        self.cancel_token = cancel_token
        self.total_bytes = 0
        self.logger = logging.getLogger(__name__)

        self._buffer = bytearray()
        self._paused = False
        self._done = False
        self._error: Optional[pycurl.error] = None
        self._curl = None
        self._multi = None

    def open(self) -> "CurlStream":
        """
        Connect and wait for the first response bytes (or the end of the transfer)

        Returns:
            CurlStream: self, with total_bytes set

        Raises:
            ConnectionOpenFailed: If libcurl handles cannot be created
            StreamOpenFailed: If the URL cannot be fetched
        """
        try:
            self._curl = pycurl.Curl()
            self._multi = pycurl.CurlMulti()
        except pycurl.error as e:
            raise ConnectionOpenFailed.from_curl_error(
                "Cannot initialise the network session.", e, "curl_easy_init"
            )

        c = self._curl
        try:
            c.setopt(pycurl.URL, quote_url(self.url))
            c.setopt(pycurl.CAINFO, certifi.where())  # SSL certificate verification
            c.setopt(pycurl.USERAGENT, self.user_agent)
            c.setopt(pycurl.FOLLOWLOCATION, 1)
            c.setopt(pycurl.MAXREDIRS, MAX_REDIRECTS)
            c.setopt(pycurl.CONNECTTIMEOUT, self.connect_timeout)
            c.setopt(pycurl.FAILONERROR, 1)  # HTTP >= 400 fails instead of saving the error page
            c.setopt(pycurl.NOSIGNAL, 1)
            c.setopt(pycurl.WRITEFUNCTION, self._on_data)
        except UnicodeError as e:
            self.close()
            raise StreamOpenFailed(
                f"Cannot open URL {self.url!r}.", description=str(e), operation="curl_easy_setopt"
            )
        except pycurl.error as e:
            self.close()
            raise StreamOpenFailed.from_curl_error(f"Cannot open URL {self.url}.", e, "curl_easy_setopt")

        self._multi.add_handle(c)

        while not self._buffer and not self._done and not self._is_cancelled():
            self._pump()

        if self._error is not None and not self._buffer:
            error = self._error
            self.close()
            raise StreamOpenFailed.from_curl_error(f"Cannot open URL {self.url}.", error, "curl_multi_perform")

        length = c.getinfo(pycurl.CONTENT_LENGTH_DOWNLOAD_T)
        self.total_bytes = length if length > 0 else 0
        self.logger.debug(f"Opened {self.url}, advertised size {self.total_bytes or 'unknown'}")
        return self

    def _on_data(self, data: bytes):
        if len(self._buffer) >= self.buffer_size:
            # libcurl hands the same data again once the transfer is resumed
            self._paused = True
            return pycurl.WRITEFUNC_PAUSE
        self._buffer.extend(data)
        return None

    def _is_cancelled(self) -> bool:
        return self.cancel_token is not None and self.cancel_token.cancelled

    def _perform(self) -> None:
        if self._done:
            return
        while True:
            ret, active = self._multi.perform()
            if ret != pycurl.E_CALL_MULTI_PERFORM:
                break
        if active == 0:
            self._collect()

    def _collect(self) -> None:
        _, _, failed = self._multi.info_read()
        for _, errno, errmsg in failed:
            self._error = pycurl.error(errno, errmsg)
        self._done = True

    def _pump(self) -> None:
        self._perform()
        if self._buffer or self._done:
            return
        wait = self._multi.timeout()
        wait = SELECT_TIMEOUT if wait < 0 else min(SELECT_TIMEOUT, wait / 1000.0)
        if wait > 0:
            self._multi.select(wait)

    def read(self, size: int = DEFAULT_CHUNK_SIZE) -> bytes:
        """
        Return up to size bytes; b"" once the transfer has finished

        Raises:
            StreamReadFailed: If libcurl reported an error and nothing is left buffered
        """
        if self._paused and len(self._buffer) < self.buffer_size:
            self._paused = False
            self._curl.pause(pycurl.PAUSE_CONT)
            self._perform()

        while not self._buffer and not self._done and not self._is_cancelled():
            self._pump()

        if not self._buffer and self._error is not None:
            error, self._error = self._error, None
            raise StreamReadFailed.from_curl_error("Read error on remote stream.", error, "curl_multi_perform")

        chunk = bytes(self._buffer[:size])
        del self._buffer[:size]
        return chunk

    def close(self) -> None:
        if self._multi is not None and self._curl is not None:
            try:
                self._multi.remove_handle(self._curl)
            except pycurl.error:
                pass
        if self._curl is not None:
            self._curl.close()
        if self._multi is not None:
            self._multi.close()
        self._curl = None
        self._multi = None

    def __enter__(self) -> "CurlStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_remote(url: str, user_agent: str = USER_AGENT,
                buffer_size: int = DEFAULT_CHUNK_SIZE,
                connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
                cancel_token: Optional[CancellationToken] = None) -> CurlStream:
    """Open url and return a stream positioned at the first byte of the body"""
    stream = CurlStream(url, user_agent, buffer_size, connect_timeout, cancel_token)
    return stream.open()
