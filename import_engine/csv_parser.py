"""
import_engine.csv_parser - Incremental delimited-row parsing.

Responsibilities:
  • UTF-8 decoding across chunk boundaries (BOM removed)
  • Reassembling records whose quoted fields span physical lines
  • Splitting each record with the csv module, trimming every value
  • Skipping blank lines

Bytes are pushed in with ``feed`` and complete records come back out,
so the caller decides when to read more input.
"""

from __future__ import annotations

import codecs
import csv
from typing import Iterator

from import_engine.errors import CsvSyntaxError

QUOTE = '"'


def _strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


class DelimitedRowParser:
    """
    Push parser yielding RawRow dicts.

    With a non-empty ``columns`` list each row maps column name → value
    (extra values are dropped, missing ones are absent).  With no
    columns, rows are keyed by position.
    """

    def __init__(self, delimiter: str = ",", columns: list[str] | None = None):
        self.delimiter = delimiter
        self.columns = list(columns or [])
        self.records_read = 0
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._started = False
        self._tail = ""                 # partial physical line
        self._record: list[str] = []    # physical lines of the open record
        self._in_quotes = False
        self._field_start = True
        self._after_quote = False
        self._closed = False

    # ── Public API ─────────────────────────────────────────────────────

    def feed(self, data: bytes) -> Iterator[dict]:
        if self._closed:
            raise RuntimeError("parser is closed")
        text = self._decoder.decode(data)
        if not self._started and text:
            text = _strip_bom(text)
            self._started = True
        yield from self._consume(text)

    def close(self) -> Iterator[dict]:
        """Flush the last record.  Raises CsvSyntaxError on an open quote."""
        if self._closed:
            return
        text = self._decoder.decode(b"", final=True)
        yield from self._consume(text)
        self._closed = True

        if self._tail:
            line, self._tail = self._tail, ""
            row = self._accept_line(line)
            if row is not None:
                yield row

        if self._record:
            raise CsvSyntaxError(
                f"Quote not closed at record {self.records_read + 1}"
            )

    def release(self):
        """Drop buffered input without parsing it."""
        self._closed = True
        self._tail = ""
        self._record.clear()

    # ── Private helpers ────────────────────────────────────────────────

    def _consume(self, text: str) -> Iterator[dict]:
        if not text:
            return
        lines = (self._tail + text).split("\n")
        self._tail = lines.pop()
        for line in lines:
            row = self._accept_line(line)
            if row is not None:
                yield row

    def _accept_line(self, line: str):
        line = line.rstrip("\r")
        self._scan(line)
        self._record.append(line)
        if self._in_quotes:
            return None

        record = "\n".join(self._record)
        self._record.clear()
        self._field_start = True
        self._after_quote = False
        if not record.strip():
            return None
        return self._to_row(record)

    def _scan(self, line: str):
        """Track whether the open record is inside a quoted field."""
        for ch in line:
            if self._in_quotes:
                if ch == QUOTE:
                    self._in_quotes = False
                    self._after_quote = True
                continue
            if ch == QUOTE and (self._field_start or self._after_quote):
                self._in_quotes = True
                self._after_quote = False
                self._field_start = False
                continue
            self._after_quote = False
            if ch == " " and self._field_start:
                continue            # leading blanks before an opening quote
            self._field_start = ch == self.delimiter

    def _to_row(self, record: str) -> dict:
        self.records_read += 1
        try:
            values = next(csv.reader(
                [record], delimiter=self.delimiter, skipinitialspace=True, strict=True,
            ))
        except csv.Error as exc:
            raise CsvSyntaxError(f"Record {self.records_read}: {exc}") from exc

        values = [v.strip() for v in values]
        if self.columns:
            return dict(zip(self.columns, values))
        return dict(enumerate(values))
