"""Shared fixtures for curlget tests."""

import functools
import threading
from http.server import BaseHTTPRequestHandler, SimpleHTTPRequestHandler, ThreadingHTTPServer

import pytest

from curlget.clock import TransferClock
from curlget.errors import StreamReadFailed


class FakeStream:
    """Remote stream double returning a fixed list of chunks, then b''."""

    def __init__(self, chunks, total_bytes=0, fail_at=None, on_read=None):
        self.chunks = list(chunks)
        self.total_bytes = total_bytes
        self.fail_at = fail_at
        self.on_read = on_read
        self.reads = 0
        self.closed = False

    def read(self, size):
        index = self.reads
        self.reads += 1
        if self.on_read is not None:
            self.on_read(index)
        if self.fail_at is not None and index == self.fail_at:
            raise StreamReadFailed("Read error on remote stream.", code=18,
                                   description="transfer closed", operation="read")
        if index < len(self.chunks):
            return self.chunks[index][:size]
        return b""

    def close(self):
        self.closed = True


class RecordingSink:
    """Writable sink double that can fail or short-write on a given call."""

    name = "sink.bin"

    def __init__(self, fail_on=None, short_on=None):
        self.data = bytearray()
        self.writes = 0
        self.fail_on = fail_on
        self.short_on = short_on

    def write(self, chunk):
        index = self.writes
        self.writes += 1
        if self.fail_on is not None and index == self.fail_on:
            raise OSError(28, "No space left on device")
        if self.short_on is not None and index == self.short_on:
            self.data.extend(chunk[:1])
            return 1
        self.data.extend(chunk)
        return len(chunk)

    def flush(self):
        pass


class RecordingRenderer:
    """Renderer double recording what it was asked to draw."""

    def __init__(self):
        self.calls = []
        self.finished = 0

    def render(self, state, size_str, rate_str, total_str=None, eta_str=None):
        self.calls.append({
            "bytes": state.bytes_transferred,
            "size": size_str,
            "rate": rate_str,
            "total": total_str,
            "eta": eta_str,
        })
        return len(size_str) + len(rate_str)

    def finish(self):
        self.finished += 1


def make_clock(ticks, interval_ms=250, wall=1000.0):
    """Clock whose monotonic source yields `ticks` (seconds) and whose wall time is fixed."""
    tick_iter = iter(ticks)
    return TransferClock(
        interval_ms=interval_ms,
        wall=lambda: wall,
        ticks=lambda: next(tick_iter),
    )


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def http_root(tmp_path):
    root = tmp_path / 'www'
    root.mkdir()
    return root


def _serve(handler):
    server = ThreadingHTTPServer(('127.0.0.1', 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server, thread


@pytest.fixture
def http_server(http_root):
    """Serve http_root over HTTP on localhost; yields the base URL."""

    class QuietHandler(SimpleHTTPRequestHandler):
        def log_message(self, format, *args):
            pass

    handler = functools.partial(QuietHandler, directory=str(http_root))
    server, thread = _serve(handler)
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)


@pytest.fixture
def truncating_server():
    """Advertise 100 bytes, send 40, then drop the connection."""

    class TruncatingHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            self.send_response(200)
            self.send_header('Content-Length', '100')
            self.end_headers()
            self.wfile.write(b'x' * 40)
            self.wfile.flush()
            self.close_connection = True

        def log_message(self, format, *args):
            pass

    server, thread = _serve(TruncatingHandler)
    yield f"http://127.0.0.1:{server.server_address[1]}/short.bin"
    server.shutdown()
    server.server_close()
    thread.join(timeout=5)
