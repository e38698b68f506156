from pathlib import Path

import pytest

from logview.core.color import RESET
from logview.core.config import Config
from logview.core.errors import FileOpenError, FileShrunkError
from logview.core.poll_loop import PollLoop
from logview.core import tail_reader
from logview.core.tail_reader import TailReader

INFO = "\033[38;2;50;150;240m"
ERROR = "\033[38;2;233;20;20m"


def _append(path: Path, text: str) -> None:
    with path.open("a", encoding="utf-8") as f:
        f.write(text)


def test_run_prints_tail_then_appended_lines(tmp_path: Path):
    log_file = tmp_path / "app.log"
    log_file.write_text("skipped\n[info] one\n", encoding="utf-8")
    out: list[str] = []
    slept: list[float] = []
    appends = iter(["[error] two\n", "", "thr", "ee\n"])

    def _sleep(sec: float) -> None:
        slept.append(sec)
        _append(log_file, next(appends))

    cfg = Config(tail_line_count=1, poll_interval_ms=250)
    loop = PollLoop(TailReader(log_file, cfg.max_line_length), cfg, sink=out.append, sleep=_sleep)
    loop.run(max_cycles=4)

    assert out == [
        f"{INFO}[info]{RESET} one",
        f"{ERROR}[error]{RESET} two",
        "three",
    ]
    assert slept == [0.25, 0.25, 0.25, 0.25]
    assert loop.reader.state.last_line_number == 4


def test_startup_with_line_numbers_and_whole_line_mode(tmp_path: Path):
    log_file = tmp_path / "app.log"
    log_file.write_text("[info] a\nb\n", encoding="utf-8")
    out: list[str] = []

    cfg = Config(show_line_number=True, highlight_whole_line=True)
    rendered = PollLoop(TailReader(log_file, cfg.max_line_length), cfg, sink=out.append).startup()

    number = "\033[38;2;175;95;0m"
    assert out == [f"{number}1{RESET} {INFO}[info] a{RESET}", f"{number}2{RESET} b"]
    assert [r.line_number for r in rendered] == [1, 2]


def test_poll_once_does_not_commit_when_sink_fails(tmp_path: Path):
    log_file = tmp_path / "app.log"
    log_file.write_text("", encoding="utf-8")
    cfg = Config(tail_line_count=0)
    calls: list[str] = []

    def _sink(text: str) -> None:
        calls.append(text)
        if len(calls) == 2:
            raise RuntimeError("stdout closed")

    loop = PollLoop(TailReader(log_file, cfg.max_line_length), cfg, sink=_sink)
    loop.startup()
    before = loop.reader.state
    _append(log_file, "one\ntwo\n")

    with pytest.raises(RuntimeError):
        loop.poll_once()
    assert loop.reader.state == before


def test_run_propagates_shrink_error(tmp_path: Path):
    log_file = tmp_path / "app.log"
    log_file.write_text("one\ntwo\n", encoding="utf-8")
    cfg = Config()

    def _sleep(_sec: float) -> None:
        log_file.write_text("", encoding="utf-8")

    loop = PollLoop(TailReader(log_file, cfg.max_line_length), cfg, sink=lambda _text: None, sleep=_sleep)
    with pytest.raises(FileShrunkError):
        loop.run(max_cycles=3)


def test_run_fails_fast_on_missing_file(tmp_path: Path):
    cfg = Config()
    loop = PollLoop(TailReader(tmp_path / "nope.log", cfg.max_line_length), cfg, sink=lambda _text: None)
    with pytest.raises(FileOpenError):
        loop.run(max_cycles=1)


class _InterruptingLog:
    """Real file handle whose reads raise KeyboardInterrupt, as Ctrl-C would mid-poll."""

    def __init__(self, fh):
        self.fh = fh

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.fh.close()

    def seek(self, *args):
        return self.fh.seek(*args)

    def tell(self):
        return self.fh.tell()

    def readline(self, *args):
        raise KeyboardInterrupt


def test_interrupt_mid_poll_closes_handle_and_keeps_state(monkeypatch, tmp_path: Path):
    log_file = tmp_path / "app.log"
    log_file.write_text("one\n", encoding="utf-8")
    cfg = Config(tail_line_count=1)
    out: list[str] = []

    loop = PollLoop(TailReader(log_file, cfg.max_line_length), cfg, sink=out.append)
    loop.startup()
    before = loop.reader.state
    _append(log_file, "two\n")

    opened: list[_InterruptingLog] = []
    real_open_log = tail_reader._open_log

    def _open_log(path):
        handle = _InterruptingLog(real_open_log(path))
        opened.append(handle)
        return handle

    monkeypatch.setattr(tail_reader, "_open_log", _open_log)

    with pytest.raises(KeyboardInterrupt):
        loop.poll_once()

    assert len(opened) == 1
    assert opened[0].fh.closed
    assert loop.reader.state == before
    assert out == ["one"]
