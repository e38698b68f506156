from __future__ import annotations

import logging
import sys
import time
from typing import Callable, Iterable

from logview.core.config import Config
from logview.core.highlight import RenderedLine, render_numbered
from logview.core.tail_reader import NumberedLine, TailReader

logger = logging.getLogger(__name__)


def write_stdout(text: str) -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


class PollLoop:
    def __init__(
        self,
        reader: TailReader,
        cfg: Config,
        sink: Callable[[str], None] = write_stdout,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.reader = reader
        self.cfg = cfg
        self.sink = sink
        self.sleep = sleep
        self.cycles = 0

    def _emit(self, lines: Iterable[NumberedLine]) -> list[RenderedLine]:
        rendered: list[RenderedLine] = []
        for line_number, text in lines:
            out = render_numbered(line_number, text, self.cfg)
            self.sink(out.text)
            rendered.append(out)
        return rendered

    def startup(self) -> list[RenderedLine]:
        lines = self.reader.initialize(self.cfg.tail_line_count)
        return self._emit(lines)

    def poll_once(self) -> list[RenderedLine]:
        result = self.reader.poll()
        rendered = self._emit(result.lines)
        # Only advance once every line of the cycle reached the sink.
        self.reader.commit(result)
        self.cycles += 1
        return rendered

    def run(self, max_cycles: int | None = None) -> None:
        """Startup, then poll forever (or ``max_cycles`` times). Errors propagate to the caller."""
        self.startup()
        interval_sec = self.cfg.poll_interval_ms / 1000.0
        logger.info("polling %s every %sms", self.reader.path, self.cfg.poll_interval_ms)
        while max_cycles is None or self.cycles < max_cycles:
            self.sleep(interval_sec)
            self.poll_once()
