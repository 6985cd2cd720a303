"""Tests for the libcurl-backed remote stream, against a local HTTP server."""

import os

import pytest

from curlget.errors import StreamOpenFailed, StreamReadFailed
from curlget.remote import CurlStream, open_remote, quote_url
from curlget.signals import CancellationToken


def read_all(stream, size=16384):
    parts = []
    while True:
        chunk = stream.read(size)
        if not chunk:
            return b''.join(parts)
        assert len(chunk) <= size
        parts.append(chunk)


def test_reads_whole_body_and_reports_size(http_server, http_root):
    payload = os.urandom(300 * 1024)
    (http_root / 'blob.bin').write_bytes(payload)

    with open_remote(f'{http_server}/blob.bin', buffer_size=16384) as stream:
        assert stream.total_bytes == len(payload)
        assert read_all(stream) == payload
        assert stream.read(16384) == b''


def test_small_reads_return_bounded_chunks(http_server, http_root):
    payload = b'0123456789' * 100
    (http_root / 'small.txt').write_bytes(payload)

    with open_remote(f'{http_server}/small.txt', buffer_size=64) as stream:
        assert read_all(stream, size=64) == payload


def test_empty_body(http_server, http_root):
    (http_root / 'empty').write_bytes(b'')

    with open_remote(f'{http_server}/empty') as stream:
        assert stream.total_bytes == 0
        assert stream.read(16384) == b''


def test_http_error_fails_open(http_server):
    with pytest.raises(StreamOpenFailed) as exc_info:
        open_remote(f'{http_server}/does-not-exist')

    assert exc_info.value.code == 22  # CURLE_HTTP_RETURNED_ERROR
    assert '404' in exc_info.value.description


def test_unreachable_host_fails_open():
    # Port 9 on localhost is almost never listening
    with pytest.raises(StreamOpenFailed) as exc_info:
        open_remote('http://127.0.0.1:9/file', connect_timeout=5)

    assert exc_info.value.code is not None


def test_truncated_body_raises_read_error(truncating_server):
    with open_remote(truncating_server) as stream:
        assert stream.total_bytes == 100
        received = b''
        with pytest.raises(StreamReadFailed) as exc_info:
            while True:
                chunk = stream.read(16384)
                if not chunk:
                    break
                received += chunk

    assert received == b'x' * 40
    assert exc_info.value.code == 18  # CURLE_PARTIAL_FILE


def test_cancelled_stream_stops_reading(http_server, http_root):
    (http_root / 'file.bin').write_bytes(b'a' * 1024)
    token = CancellationToken()
    stream = CurlStream(f'{http_server}/file.bin', cancel_token=token)
    token.cancel()

    with stream.open():
        assert stream.read(16384) == b''


def test_quote_url_encodes_non_ascii_and_keeps_reserved():
    assert quote_url('https://h/café zip.iso?a=1&b=%20#x') == (
        'https://h/caf%C3%A9%20zip.iso?a=1&b=%20#x'
    )


def test_non_ascii_path_is_fetched(http_server, http_root):
    payload = b'accented'
    (http_root / 'café.zip').write_bytes(payload)

    with open_remote(f'{http_server}/café.zip') as stream:
        assert stream.total_bytes == len(payload)
        assert read_all(stream) == payload


def test_unencodable_url_fails_open_and_releases_handles():
    stream = CurlStream('http://127.0.0.1:9/bad\udcff.zip')

    with pytest.raises(StreamOpenFailed) as exc_info:
        stream.open()

    assert exc_info.value.operation == 'curl_easy_setopt'
    assert stream._curl is None
    assert stream._multi is None
