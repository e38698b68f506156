from logview.core.color import RESET, Color
from logview.core.config import Config
from logview.core.highlight import RenderedLine, render, render_line_number, render_numbered
from logview.core.levels import DEFAULT_LEVEL_TABLE

INFO = "\033[38;2;50;150;240m"
ERROR = "\033[38;2;233;20;20m"


def test_render_keyword_mode_colors_only_the_marker():
    out = render("12:00 [error] disk full\n", DEFAULT_LEVEL_TABLE, highlight_whole_line=False)
    assert out == f"12:00 {ERROR}[error]{RESET} disk full"


def test_render_line_mode_wraps_whole_trimmed_line():
    out = render("[info] ready\r\n", DEFAULT_LEVEL_TABLE, highlight_whole_line=True)
    assert out == f"{INFO}[info] ready{RESET}"


def test_render_without_marker_returns_trimmed_line():
    assert render("plain text\r\n", DEFAULT_LEVEL_TABLE, highlight_whole_line=False) == "plain text"
    assert render("plain text", DEFAULT_LEVEL_TABLE, highlight_whole_line=True) == "plain text"


def test_render_priority_follows_rule_order_not_position():
    out = render("[error] then [info]", DEFAULT_LEVEL_TABLE, highlight_whole_line=False)
    assert out == f"[error] then {INFO}[info]{RESET}"


def test_render_highlights_first_occurrence_only():
    out = render("[error] a [error] b", DEFAULT_LEVEL_TABLE, highlight_whole_line=False)
    assert out == f"{ERROR}[error]{RESET} a [error] b"


def test_render_uses_custom_markers():
    levels = DEFAULT_LEVEL_TABLE.replace("warning", marker="WARN", color=Color(r=1, g=2, b=3))
    out = render("x WARN y", levels, highlight_whole_line=False)
    assert out == f"x \033[38;2;1;2;3mWARN{RESET} y"


def test_render_line_number_prefix():
    assert render_line_number(42, Color(r=175, g=95, b=0)) == f"\033[38;2;175;95;0m42{RESET} "


def test_render_numbered_adds_prefix_only_when_enabled():
    plain = render_numbered(7, "[info] hi\n", Config())
    assert plain == RenderedLine(7, f"{INFO}[info]{RESET} hi")

    numbered = render_numbered(7, "no level", Config(show_line_number=True))
    assert numbered.text == f"\033[38;2;175;95;0m7{RESET} no level"


def test_render_numbered_respects_truncated_text():
    cfg = Config(max_line_length=500)
    line = "z" * 500
    assert render_numbered(1, line, cfg).text == line
