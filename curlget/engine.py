"""
Chunked Transfer Loop: pulls chunks from a remote stream into a local sink
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional

from .clock import TransferClock
from .config import DEFAULT_CHUNK_SIZE
from .errors import DownloadError, SizeMismatch, StreamReadFailed, WriteFailed
from .signals import CancellationToken
from .units import estimate_remaining, format_eta, format_rate, format_size


class TransferPhase(Enum):
    IDLE = "idle"
    TRANSFERRING = "transferring"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_PHASES = (TransferPhase.COMPLETED, TransferPhase.FAILED, TransferPhase.CANCELLED)


@dataclass
class TransferState:
    """Counters owned by one run of the loop; 0 total means the size is unknown"""
    total_bytes: int = 0
    bytes_transferred: int = 0
    start_timestamp: float = 0.0
    last_render_tick: int = 0
    last_rendered_length: int = 0

    @property
    def total_known(self) -> bool:
        return self.total_bytes > 0


@dataclass
class TransferResult:
    phase: TransferPhase
    bytes_transferred: int
    total_bytes: int
    elapsed_seconds: float
    error: Optional[DownloadError] = None
    read_error: Optional[StreamReadFailed] = None

    @property
    def succeeded(self) -> bool:
        return self.phase is TransferPhase.COMPLETED


class TransferLoop:
    def __init__(self, renderer, clock: Optional[TransferClock] = None,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 cancel_token: Optional[CancellationToken] = None):
        """
        Initialize the Transfer Loop

        Args:
            renderer: Progress line renderer, asked to redraw on the clock's cadence
            clock (TransferClock, optional): Time source and redraw interval
            chunk_size (int): Maximum bytes requested per read
            cancel_token (CancellationToken, optional): Checked around every read
        """
        self.renderer = renderer
        self.clock = clock if clock is not None else TransferClock()
        self.chunk_size = chunk_size
        self.cancel_token = cancel_token
        self.phase = TransferPhase.IDLE
        self.logger = logging.getLogger(__name__)

    def run(self, stream, sink: BinaryIO, total_bytes: int = 0) -> TransferResult:
        """
        Transfer the whole stream into the sink

        Args:
            stream: Open remote stream with read(size) -> bytes; b"" means end-of-stream
            sink: Open writable binary file
            total_bytes (int): Advertised size, 0 when the server did not send one

        Returns:
            TransferResult: Terminal phase and final counters

        Raises:
            RuntimeError: If this loop already ran a transfer
        """
        if self.phase is not TransferPhase.IDLE:
            raise RuntimeError("A TransferLoop performs exactly one transfer")

        state = TransferState(total_bytes=max(0, total_bytes or 0))
        state.start_timestamp = self.clock.start()
        state.last_render_tick = self.clock.tick()
        self.phase = TransferPhase.TRANSFERRING

        error: Optional[DownloadError] = None
        read_error: Optional[StreamReadFailed] = None

        while True:
            if self._cancelled():
                self.phase = TransferPhase.CANCELLED
                break

            try:
                chunk = self._read(stream)
            except StreamReadFailed as e:
                # A failing read ends the stream; the byte count decides the outcome
                self.logger.warning(f"Read stopped early: {e.description or e.message}")
                read_error = e
                break

            if self._cancelled():
                self.phase = TransferPhase.CANCELLED
                break

            if not chunk:
                break

            try:
                self._write(sink, chunk)
            except WriteFailed as e:
                error = e
                self.phase = TransferPhase.FAILED
                break

            state.bytes_transferred += len(chunk)

            now = self.clock.tick()
            if self.clock.should_redraw(state.last_render_tick, now):
                self._render(state)
                state.last_render_tick = now

        self._render(state)
        self.renderer.finish()

        if self.phase is TransferPhase.TRANSFERRING:
            if not state.total_known or state.bytes_transferred == state.total_bytes:
                self.phase = TransferPhase.COMPLETED
            else:
                error = SizeMismatch(state.total_bytes, state.bytes_transferred)
                self.phase = TransferPhase.FAILED

        result = TransferResult(
            phase=self.phase,
            bytes_transferred=state.bytes_transferred,
            total_bytes=state.total_bytes,
            elapsed_seconds=self.clock.elapsed_seconds(state.start_timestamp),
            error=error,
            read_error=read_error,
        )
        self.logger.debug(
            f"Transfer {result.phase.value}: {result.bytes_transferred} of "
            f"{result.total_bytes or 'unknown'} bytes in {result.elapsed_seconds:.1f}s"
        )
        return result

    def _cancelled(self) -> bool:
        return self.cancel_token is not None and self.cancel_token.cancelled

    def _read(self, stream) -> bytes:
        try:
            return stream.read(self.chunk_size)
        except OSError as e:
            raise StreamReadFailed.from_os_error("Read error on remote stream.", e, "read")

    def _write(self, sink: BinaryIO, chunk: bytes) -> None:
        """Write and flush one chunk, all or nothing as far as the counters go"""
        name = getattr(sink, "name", "destination")
        try:
            written = sink.write(chunk)
            sink.flush()
        except OSError as e:
            raise WriteFailed.from_os_error(f"Write error on '{name}'.", e, "write")

        if written is not None and written != len(chunk):
            raise WriteFailed(
                f"Write error on '{name}'.",
                description=f"wrote {written} of {len(chunk)} bytes",
                operation="write",
            )

    def _render(self, state: TransferState) -> None:
        elapsed = self.clock.elapsed_seconds(state.start_timestamp)
        size_str = format_size(state.bytes_transferred)
        rate_str = format_rate(state.bytes_transferred, elapsed)

        total_str = eta_str = None
        if state.total_known:
            total_str = format_size(state.total_bytes)
            eta_str = format_eta(
                estimate_remaining(state.bytes_transferred, state.total_bytes, elapsed)
            )

        state.last_rendered_length = self.renderer.render(
            state, size_str, rate_str, total_str, eta_str
        )
