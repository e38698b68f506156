from __future__ import annotations

import logging
import os
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, NamedTuple

from logview.core.errors import FileOpenError, FileShrunkError

logger = logging.getLogger(__name__)

# Worst-case UTF-8 width; a readline() of max_line_length * 4 bytes always holds max_line_length chars.
MAX_BYTES_PER_CHAR = 4


class NumberedLine(NamedTuple):
    line_number: int
    text: str


@dataclass(frozen=True)
class TailState:
    path: str
    # Raw file size at the last observation; a smaller size on a later poll means the file shrank.
    last_observed_size: int = 0
    last_line_number: int = 0
    # Resume point, just past the last complete line handed out.
    read_offset: int = 0
    # Kept head of an overlong unterminated line, and how far its tail was already skipped.
    pending_head: str | None = None
    scan_offset: int = 0


@dataclass(frozen=True)
class PollResult:
    lines: list[NumberedLine] = field(default_factory=list)
    state: TailState | None = None


def _open_log(path: str) -> BinaryIO:
    try:
        return open(path, "rb")
    except OSError as exc:
        raise FileOpenError(path, exc.strerror or str(exc)) from exc


class LineScanner:
    """Yield ``(text, offset_after_line)`` for each newline-terminated line from the current position.

    A short unterminated fragment at EOF is left alone and re-read on the next scan. An
    overlong one keeps its truncated head in ``pending_head`` and the skip position in
    ``scan_offset``, so a later scan resumes there instead of re-reading the whole line.
    """

    def __init__(self, fh: BinaryIO, max_line_length: int, pending_head: str | None = None):
        self.fh = fh
        self.max_line_length = max_line_length
        self.limit = max_line_length * MAX_BYTES_PER_CHAR
        self.pending_head = pending_head
        self.scan_offset = 0

    def _decode(self, raw: bytes) -> str:
        return raw.decode("utf-8", errors="replace").rstrip("\r\n")[: self.max_line_length]

    def _skip_to_newline(self) -> bool:
        while True:
            chunk = self.fh.readline(self.limit)
            if not chunk:
                return False
            if chunk.endswith(b"\n"):
                return True

    def __iter__(self) -> Iterator[tuple[str, int]]:
        head = self.pending_head
        self.pending_head = None
        while True:
            if head is None:
                raw = self.fh.readline(self.limit)
                if not raw:
                    return
                if raw.endswith(b"\n"):
                    yield self._decode(raw), self.fh.tell()
                    continue
                if len(raw) < self.limit:
                    return
                head = self._decode(raw)

            if not self._skip_to_newline():
                self.pending_head = head
                self.scan_offset = self.fh.tell()
                return
            yield head, self.fh.tell()
            head = None


def initialize(path: str | Path, tail_line_count: int, max_line_length: int) -> tuple[list[NumberedLine], TailState]:
    path = str(path)
    with _open_log(path) as fh:
        size = fh.seek(0, os.SEEK_END)
        if tail_line_count <= 0:
            logger.info("tail start path=%s size=%s history=off", path, size)
            return [], TailState(path=path, last_observed_size=size, read_offset=size)

        fh.seek(0)
        window: deque[NumberedLine] = deque(maxlen=tail_line_count)
        line_number = 0
        offset = 0
        scanner = LineScanner(fh, max_line_length)
        for text, offset in scanner:
            line_number += 1
            window.append(NumberedLine(line_number, text))

    logger.info("tail start path=%s size=%s lines=%s shown=%s", path, size, line_number, len(window))
    state = TailState(
        path=path,
        last_observed_size=max(size, offset, scanner.scan_offset),
        last_line_number=line_number,
        read_offset=offset,
        pending_head=scanner.pending_head,
        scan_offset=scanner.scan_offset,
    )
    return list(window), state


def poll_for_new_lines(state: TailState, max_line_length: int) -> PollResult:
    with _open_log(state.path) as fh:
        size = fh.seek(0, os.SEEK_END)
        if size < state.last_observed_size:
            raise FileShrunkError(state.path, state.last_observed_size, size)
        if size == state.last_observed_size:
            return PollResult(lines=[], state=state)

        fh.seek(state.scan_offset if state.pending_head is not None else state.read_offset)
        lines: list[NumberedLine] = []
        line_number = state.last_line_number
        offset = state.read_offset
        scanner = LineScanner(fh, max_line_length, pending_head=state.pending_head)
        for text, offset in scanner:
            line_number += 1
            lines.append(NumberedLine(line_number, text))

    logger.debug(
        "poll path=%s size=%s grown=%s new_lines=%s",
        state.path,
        size,
        size - state.last_observed_size,
        len(lines),
    )
    return PollResult(
        lines=lines,
        state=TailState(
            path=state.path,
            last_observed_size=max(size, offset, scanner.scan_offset),
            last_line_number=line_number,
            read_offset=offset,
            pending_head=scanner.pending_head,
            scan_offset=scanner.scan_offset,
        ),
    )


class TailReader:
    def __init__(self, path: str | Path, max_line_length: int):
        self.path = str(path)
        self.max_line_length = max_line_length
        self.state = TailState(path=self.path)

    def initialize(self, tail_line_count: int) -> list[NumberedLine]:
        lines, self.state = initialize(self.path, tail_line_count, self.max_line_length)
        return lines

    def poll(self) -> PollResult:
        return poll_for_new_lines(self.state, self.max_line_length)

    def commit(self, result: PollResult) -> None:
        if result.state is not None:
            self.state = result.state
