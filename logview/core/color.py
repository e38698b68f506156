from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

RESET = "\033[0m"


class Color(BaseModel):
    model_config = ConfigDict(frozen=True)

    r: int = Field(default=0, ge=0, le=255)
    g: int = Field(default=0, ge=0, le=255)
    b: int = Field(default=0, ge=0, le=255)

    @property
    def escape(self) -> str:
        return f"\033[38;2;{self.r};{self.g};{self.b}m"

    def wrap(self, text: str) -> str:
        return f"{self.escape}{text}{RESET}"

    def __str__(self) -> str:
        return f"{self.r},{self.g},{self.b}"


def parse_color(value: str) -> Color:
    """Parse ``"r,g,b"``; raises ValueError on anything else."""
    parts = [p.strip() for p in (value or "").split(",")]
    if len(parts) != 3:
        raise ValueError(f"Invalid color: {value}")
    try:
        r, g, b = (int(p) for p in parts)
    except ValueError as exc:
        raise ValueError(f"Invalid color: {value}") from exc
    for channel in (r, g, b):
        if channel < 0 or channel > 255:
            raise ValueError(f"Invalid color: {value}")
    return Color(r=r, g=g, b=b)
