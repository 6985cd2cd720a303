"""Tests for the progress line renderer."""

import io

from curlget.config import TerminalConfig
from curlget.engine import TransferState
from curlget.renderer import ProgressLineRenderer
from curlget.spinner import TabSpinner


def test_known_total_line():
    out = io.StringIO()
    renderer = ProgressLineRenderer(out)
    state = TransferState(total_bytes=2048, bytes_transferred=1024)

    length = renderer.render(state, '1.00 KiB', '8.19 Kbps', '2.00 KiB', '00:01')

    expected = 'Total Size: 2.00 KiB / Downloaded: 1.00 KiB [1024 / 2048] - 8.19 Kbps - ETA 00:01'
    assert out.getvalue() == '\r' + expected
    assert length == len(expected)


def test_unknown_total_line_has_no_eta():
    out = io.StringIO()
    renderer = ProgressLineRenderer(out)
    state = TransferState(total_bytes=0, bytes_transferred=10)

    renderer.render(state, '10 Bytes', '80 bps', None, '01:00')

    assert out.getvalue() == '\rTotal Size: unknown / Downloaded: 10 Bytes [10] - 80 bps'
    assert 'ETA' not in out.getvalue()


def test_shorter_line_pads_over_previous_line():
    out = io.StringIO()
    renderer = ProgressLineRenderer(out)
    state = TransferState(total_bytes=0, bytes_transferred=5)

    state.last_rendered_length = renderer.render(state, '5 Bytes', '123.45 Mbps')
    first_width = state.last_rendered_length
    out.seek(0)
    out.truncate()

    length = renderer.render(state, '5 Bytes', '0 bps')

    emitted = out.getvalue()
    assert emitted.startswith('\r')
    assert length < first_width
    assert len(emitted) - 1 >= first_width
    assert emitted.endswith(' ' * (first_width - length))


def test_longer_line_is_not_padded():
    out = io.StringIO()
    renderer = ProgressLineRenderer(out)
    state = TransferState(total_bytes=0, bytes_transferred=5, last_rendered_length=3)

    length = renderer.render(state, '5 Bytes', '40 bps')

    assert len(out.getvalue()) == length + 1


def test_finish_moves_to_next_line():
    out = io.StringIO()
    ProgressLineRenderer(out).finish()
    assert out.getvalue() == '\n'


def test_enhanced_terminal_reports_tab_percentage():
    out, tab = io.StringIO(), io.StringIO()
    terminal = TerminalConfig(enhanced=True)
    renderer = ProgressLineRenderer(out, terminal, TabSpinner(terminal, tab))
    state = TransferState(total_bytes=200, bytes_transferred=50)

    renderer.render(state, '50 Bytes', '0 bps', '200 Bytes', '--:--')

    assert tab.getvalue() == '\x1b]9;4;1;25\x1b\\'
    assert '\x1b' not in out.getvalue()


def test_plain_terminal_writes_no_escape_sequences():
    out, tab = io.StringIO(), io.StringIO()
    terminal = TerminalConfig(enhanced=False)
    renderer = ProgressLineRenderer(out, terminal, TabSpinner(terminal, tab))
    state = TransferState(total_bytes=200, bytes_transferred=50)

    renderer.render(state, '50 Bytes', '0 bps', '200 Bytes', '--:--')

    assert tab.getvalue() == ''
