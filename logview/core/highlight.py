from __future__ import annotations

from typing import NamedTuple

from logview.core.color import Color
from logview.core.config import Config
from logview.core.levels import LevelTable


class RenderedLine(NamedTuple):
    line_number: int
    text: str


def trim_line_ending(line: str) -> str:
    return line.rstrip("\r\n")


def render(line: str, levels: LevelTable, highlight_whole_line: bool) -> str:
    text = trim_line_ending(line)
    match = levels.find(text)
    if match is None:
        return text

    rule, pos = match
    if highlight_whole_line:
        return rule.color.wrap(text)

    end = pos + len(rule.marker)
    return f"{text[:pos]}{rule.color.wrap(text[pos:end])}{text[end:]}"


def render_line_number(line_number: int, color: Color) -> str:
    return f"{color.wrap(str(line_number))} "


def render_numbered(line_number: int, line: str, cfg: Config) -> RenderedLine:
    body = render(line, cfg.levels, cfg.highlight_whole_line)
    if cfg.show_line_number:
        body = render_line_number(line_number, cfg.line_number_color) + body
    return RenderedLine(line_number, body)
