"""
import_engine.importer - Top-level orchestrator.

Coordinates header → csv_parser → row_processor → duplicates →
reconciler and produces a structured ImportSummary.

ImportCoordinator is a push-driven state machine:

    AWAITING_HEADER --feed(first "\\n")--> STREAMING --finish()--> FINISHED
           |                                   |
           +------ bad header / too large / CSV syntax / close() ------> ABORTED

It never reads input itself, so it can be driven by blocking reads
(``run_import``), callbacks or an async loop alike.
"""

from __future__ import annotations

import enum
import io
import logging
import time
from contextlib import closing
from typing import Callable, Iterator, Optional

import config
from import_engine.csv_parser import DelimitedRowParser
from import_engine.duplicates import DuplicateTracker
from import_engine.errors import (
    BatchWriteError, FileTooLarge, HeaderError, ImportAborted, NoFileAttached,
)
from import_engine.field_map import field_resolver, resolve_named
from import_engine.header import HeaderResult, resolve_header
from import_engine.reconciler import BatchReconciler, PendingRow
from import_engine.report import (
    BAD_FORMAT, DUP_IN_FILE, MODE_INSERT, UPSERT_FAIL, ImportSummary, RowError,
)
from import_engine.row_processor import normalize_row

logger = logging.getLogger(__name__)


class State(enum.Enum):
    AWAITING_HEADER = "awaiting_header"
    STREAMING = "streaming"
    FINISHED = "finished"
    ABORTED = "aborted"


class ImportCoordinator:
    """Drives one import run from raw bytes to an ImportSummary."""

    def __init__(
        self,
        repository,
        *,
        mode: str = MODE_INSERT,
        dry_run: bool = True,
        batch_size: Optional[int] = None,
        max_bytes: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.summary = ImportSummary(mode=mode, dry_run=dry_run)
        self.reconciler = BatchReconciler(repository, mode=mode, dry_run=dry_run)
        self.tracker = DuplicateTracker()
        self.batch_size = batch_size or config.IMPORT_BATCH_SIZE
        self.max_bytes = max_bytes or config.IMPORT_MAX_BYTES
        self.state = State.AWAITING_HEADER
        self.header: Optional[HeaderResult] = None

        self._clock = clock
        self._started = clock()
        self._head = bytearray()
        self._parser: Optional[DelimitedRowParser] = None
        self._resolve = resolve_named
        self._batch: list[PendingRow] = []
        self._bytes_read = 0
        self._row_num = 0
        self._halted = False     # set after a failed batch write

    # ── Transitions ────────────────────────────────────────────────────

    @property
    def accepting(self) -> bool:
        """True while more input is wanted."""
        return self.state in (State.AWAITING_HEADER, State.STREAMING) and not self._halted

    def feed(self, chunk: bytes):
        """Push the next chunk of the upload."""
        self._expect(State.AWAITING_HEADER, State.STREAMING)
        if self._halted or not chunk:
            return
        self._count_bytes(len(chunk))

        if self.state is State.AWAITING_HEADER:
            self._head.extend(chunk)
            idx = self._head.find(b"\n")
            if idx == -1:
                return
            line, chunk = bytes(self._head[:idx]), bytes(self._head[idx + 1:])
            self._head.clear()
            self._start_streaming(line)
            if not chunk:
                return

        self._consume(self._parser.feed(chunk))

    def finish(self) -> ImportSummary:
        """End of input: flush the last partial batch and close the summary."""
        if self.state is State.FINISHED:
            return self.summary
        self._expect(State.AWAITING_HEADER, State.STREAMING)

        if self.state is State.AWAITING_HEADER:
            # Upload without any newline: the whole thing is the header
            if not bytes(self._head).strip():
                self._abort(HeaderError("File is empty"))
            line = bytes(self._head)
            self._head.clear()
            self._start_streaming(line)

        if self._halted:
            self._parser.release()
        else:
            self._consume(self._parser.close())
            self._flush()

        self._parser = None
        self.state = State.FINISHED
        self.summary.duration_ms = int((self._clock() - self._started) * 1000)
        return self.summary

    def close(self):
        """Release resources.  An unfinished run is aborted, never flushed."""
        if self.state in (State.AWAITING_HEADER, State.STREAMING):
            logger.warning("Import aborted before completion after %d rows",
                           self.summary.total)
            self._release()
            self.state = State.ABORTED

    # ── Internals ──────────────────────────────────────────────────────

    def _expect(self, *states: State):
        if self.state not in states:
            raise RuntimeError(f"import is {self.state.value}")

    def _abort(self, exc: ImportAborted):
        self._release()
        self.state = State.ABORTED
        raise exc

    def _release(self):
        if self._parser is not None:
            self._parser.release()
            self._parser = None
        self._batch.clear()
        self._head.clear()

    def _count_bytes(self, n: int):
        self._bytes_read += n
        if self._bytes_read > self.max_bytes:
            self._abort(FileTooLarge(f"Limit is {self.max_bytes} bytes"))

    def _start_streaming(self, line: bytes):
        header = resolve_header(line.decode("utf-8", errors="replace"))
        if not header.ok:
            self._abort(HeaderError(header.message))

        self.header = header
        self._parser = DelimitedRowParser(header.delimiter, header.columns)
        self._resolve = field_resolver(header.columns)
        self.state = State.STREAMING

    def _consume(self, rows: Iterator[dict]):
        try:
            for raw in rows:
                self._accept(raw)
                if self._halted:
                    break
        except ImportAborted as exc:
            self._abort(exc)

    def _accept(self, raw: dict):
        self._row_num += 1
        self.summary.total += 1
        row_num = self._row_num

        try:
            result = normalize_row(raw, row_num, self._resolve)
        except Exception as exc:
            logger.warning("Row %d could not be normalised: %s", row_num, exc)
            self.summary.reject_row(RowError(row_num, BAD_FORMAT, str(exc) or "Invalid row"))
            return

        if not result.ok:
            self.summary.reject_row(*result.errors)
            return

        dup = self.tracker.register(result.row)
        if dup:
            self.summary.reject_row(RowError(row_num, DUP_IN_FILE, dup))
            return

        self._batch.append(PendingRow(row_num, result.row))
        if len(self._batch) >= self.batch_size:
            self._flush()

    def _flush(self):
        if not self._batch:
            return
        batch, self._batch = self._batch, []

        try:
            outcome = self.reconciler.reconcile(batch)
        except BatchWriteError as exc:
            # Nothing from this batch was persisted; stop reading input
            self.summary.skipped += len(batch)
            self.summary.add_error(RowError(0, UPSERT_FAIL, str(exc)))
            self._halted = True
            return

        self.summary.created += outcome.created
        self.summary.updated += outcome.updated
        self.summary.skipped += outcome.skipped
        self.summary.errors.extend(outcome.errors)


# ── Blocking driver ────────────────────────────────────────────────────

def _known_size(stream) -> Optional[int]:
    seekable = getattr(stream, "seekable", None)
    if seekable is None or not seekable():
        return None
    pos = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(pos)
    return end - pos


def run_import(
    source,
    repository,
    *,
    mode: str = MODE_INSERT,
    dry_run: bool = True,
    batch_size: Optional[int] = None,
    max_bytes: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> ImportSummary:
    """
    Import a CSV upload.

    Parameters
    ----------
    source : binary file-like object, or raw CSV (bytes or str)
    repository : persistence collaborator (services.product_repository)
    mode : "insert" or "upsert"
    dry_run : classify only, issue no writes

    Returns
    -------
    ImportSummary with per-row error details.  Structural problems
    raise ImportAborted instead.
    """
    if source is None:
        raise NoFileAttached()
    if isinstance(source, str):
        source = source.encode("utf-8")
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(bytes(source))

    max_bytes = max_bytes or config.IMPORT_MAX_BYTES
    chunk_size = chunk_size or config.IMPORT_CHUNK_SIZE

    size = _known_size(source)
    if size is not None and size > max_bytes:
        raise FileTooLarge(f"Limit is {max_bytes} bytes")

    coordinator = ImportCoordinator(
        repository, mode=mode, dry_run=dry_run,
        batch_size=batch_size, max_bytes=max_bytes,
    )
    with closing(coordinator):
        while coordinator.accepting:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            if isinstance(chunk, str):
                chunk = chunk.encode("utf-8")
            coordinator.feed(chunk)
        return coordinator.finish()
