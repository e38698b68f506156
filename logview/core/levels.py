from __future__ import annotations

from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field, model_validator

from logview.core.color import Color

# Fixed priority order; the config file can retune these groups but never add or drop one.
LEVEL_GROUPS: tuple[str, ...] = ("trace", "debug", "info", "warning", "error", "critical")


class LevelRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    group: str
    marker: str = Field(min_length=1)
    color: Color


class LevelTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    rules: tuple[LevelRule, ...]

    @model_validator(mode="after")
    def _check_groups(self) -> "LevelTable":
        groups = tuple(rule.group for rule in self.rules)
        if groups != LEVEL_GROUPS:
            raise ValueError(f"level groups must be exactly {', '.join(LEVEL_GROUPS)} in that order")
        return self

    def __iter__(self) -> Iterator[LevelRule]:  # type: ignore[override]
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def get(self, group: str) -> LevelRule:
        for rule in self.rules:
            if rule.group == group:
                return rule
        raise KeyError(group)

    def find(self, line: str) -> tuple[LevelRule, int] | None:
        """Return the first rule (in table order) whose marker occurs in ``line``, with its position."""
        for rule in self.rules:
            pos = line.find(rule.marker)
            if pos >= 0:
                return rule, pos
        return None

    def replace(self, group: str, *, marker: str | None = None, color: Color | None = None) -> "LevelTable":
        self.get(group)
        rules = []
        for rule in self.rules:
            if rule.group == group:
                update: dict[str, object] = {}
                if marker is not None:
                    update["marker"] = marker
                if color is not None:
                    update["color"] = color
                rule = LevelRule.model_validate({**rule.model_dump(), **update})
            rules.append(rule)
        return LevelTable(rules=tuple(rules))


DEFAULT_LEVEL_TABLE = LevelTable(
    rules=(
        LevelRule(group="trace", marker="[trace]", color=Color(r=80, g=220, b=44)),
        LevelRule(group="debug", marker="[debug]", color=Color(r=90, g=220, b=200)),
        LevelRule(group="info", marker="[info]", color=Color(r=50, g=150, b=240)),
        LevelRule(group="warning", marker="[warning]", color=Color(r=220, g=240, b=25)),
        LevelRule(group="error", marker="[error]", color=Color(r=233, g=20, b=20)),
        LevelRule(group="critical", marker="[critical]", color=Color(r=240, g=20, b=200)),
    )
)
