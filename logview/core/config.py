from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from logview.core.color import Color, parse_color
from logview.core.errors import ConfigValidationError, UsageError
from logview.core.levels import DEFAULT_LEVEL_TABLE, LEVEL_GROUPS, LevelTable

logger = logging.getLogger(__name__)

# Hard cap on max_line_length; larger values are rejected, not clamped.
MAX_LINE_LENGTH_LIMIT = 512
BASIC_GROUP = "basic"
SPACE_TOKEN = "<space>"

# config-file key -> Config field, for the [basic] section
BASIC_KEYS = {
    "detect_interval": "poll_interval_ms",
    "lines_of_last": "tail_line_count",
    "line_max_length": "max_line_length",
    "highlight_line": "highlight_whole_line",
    "show_line_number": "show_line_number",
    "line_number_color": "line_number_color",
}
LEVEL_KEYS = ("text", "color")


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    poll_interval_ms: int = Field(default=10, ge=0)
    max_line_length: int = Field(default=500, gt=0, le=MAX_LINE_LENGTH_LIMIT)
    tail_line_count: int = Field(default=20, ge=0)
    highlight_whole_line: bool = False
    show_line_number: bool = False
    line_number_color: Color = Field(default_factory=lambda: Color(r=175, g=95, b=0))
    levels: LevelTable = DEFAULT_LEVEL_TABLE

    @field_validator("poll_interval_ms", "tail_line_count", mode="before")
    @classmethod
    def _clamp_negative(cls, value: Any) -> Any:
        # Negative interval / tail count fall back to 0 instead of failing.
        if isinstance(value, int) and not isinstance(value, bool) and value < 0:
            return 0
        return value

    def with_overrides(self, **changes: Any) -> "Config":
        """Return a validated copy with ``changes`` applied; ``None`` values are ignored."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            return self
        return _validate({**_shallow_fields(self), **changes})


def _shallow_fields(cfg: Config) -> dict[str, Any]:
    return {name: getattr(cfg, name) for name in Config.model_fields}


def _validate(data: dict[str, Any]) -> Config:
    try:
        return Config.model_validate(data)
    except ValidationError as exc:
        err = exc.errors()[0]
        field = ".".join(str(part) for part in err.get("loc", ())) or "config"
        raise ConfigValidationError(
            BASIC_GROUP, field, str(data.get(field, "")), reason=err.get("msg", "")
        ) from exc


def parse_bool(value: str) -> bool:
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    raise ValueError(f"Invalid boolean: {value}")


def parse_int(value: str, allow_ms_suffix: bool = False) -> int:
    raw = value.strip()
    if allow_ms_suffix and raw.lower().endswith("ms"):
        raw = raw[:-2].strip()
    return int(raw)


def _apply_basic(fields: dict[str, Any], key: str, value: str) -> None:
    target = BASIC_KEYS[key]
    if key == "detect_interval":
        fields[target] = parse_int(value, allow_ms_suffix=True)
    elif key == "lines_of_last":
        fields[target] = parse_int(value)
    elif key == "line_max_length":
        length = parse_int(value)
        if length < 1 or length > MAX_LINE_LENGTH_LIMIT:
            raise ValueError(f"must be between 1 and {MAX_LINE_LENGTH_LIMIT}")
        fields[target] = length
    elif key in ("highlight_line", "show_line_number"):
        fields[target] = parse_bool(value)
    else:
        fields[target] = parse_color(value)


def _apply_key_value(fields: dict[str, Any], group: str, key: str, value: str, line_no: int) -> None:
    try:
        if group in LEVEL_GROUPS and key in LEVEL_KEYS:
            levels: LevelTable = fields["levels"]
            if key == "text":
                fields["levels"] = levels.replace(group, marker=value)
            else:
                fields["levels"] = levels.replace(group, color=parse_color(value))
            return
        if group == BASIC_GROUP and key in BASIC_KEYS:
            _apply_basic(fields, key, value)
            return
    except ValueError as exc:
        # pydantic.ValidationError is a ValueError subclass as well
        raise ConfigValidationError(group, key, value, reason=str(exc).splitlines()[0], line_no=line_no) from exc

    if group != BASIC_GROUP and group not in LEVEL_GROUPS:
        raise ConfigValidationError(group, key, value, reason="unknown group", line_no=line_no)
    raise ConfigValidationError(group, key, value, reason="unknown key", line_no=line_no)


def parse_config_text(text: str, base: Config | None = None) -> Config:
    fields = _shallow_fields(base or Config())
    group: str | None = None

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip(" \t\r")
        if not line or line.startswith("#"):
            continue

        if line.startswith("[") and line.endswith("]") and len(line) >= 2:
            group = line[1:-1].strip()
            continue

        if group is None or "=" not in line:
            raise UsageError(f"Invalid line {line_no}: {raw}")

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().replace(SPACE_TOKEN, " ")
        if not key or not value:
            raise UsageError(f"Invalid line {line_no}: {raw}")

        _apply_key_value(fields, group, key, value, line_no)

    cfg = _validate(fields)
    logger.debug("config parsed: %s", cfg.model_dump())
    return cfg


def load_config(path: Path, base: Config | None = None) -> Config:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise UsageError(f"Read config failed: {path}. {exc}") from exc
    cfg = parse_config_text(text, base=base)
    logger.info("config loaded from %s", path)
    return cfg


def _format_value(value: str) -> str:
    # Leading/trailing spaces would be trimmed on reload.
    if value != value.strip():
        return value.replace(" ", SPACE_TOKEN)
    return value


def dump_config(cfg: Config) -> str:
    lines = [
        f"[{BASIC_GROUP}]",
        f"detect_interval={cfg.poll_interval_ms}",
        f"lines_of_last={cfg.tail_line_count}",
        f"line_max_length={cfg.max_line_length}",
        f"highlight_line={'true' if cfg.highlight_whole_line else 'false'}",
        f"show_line_number={'true' if cfg.show_line_number else 'false'}",
        f"line_number_color={cfg.line_number_color}",
    ]
    for rule in cfg.levels:
        lines.extend(
            [
                "",
                f"[{rule.group}]",
                f"text={_format_value(rule.marker)}",
                f"color={rule.color}",
            ]
        )
    return "\n".join(lines) + "\n"
