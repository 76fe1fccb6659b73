from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .colorspace import HSL, RGB, clamp_channel, rgb_to_hex, rgb_to_hsl

Position = tuple[float, float]


@dataclass(frozen=True)
class SampledColor:
    """A color taken from an image, derived entirely from its RGB triple.

    ``hex`` and ``hsl`` are computed from ``rgb`` on construction, so
    ``hex == rgb_to_hex(*rgb)`` and ``hsl == rgb_to_hsl(*rgb)`` always hold.
    """

    rgb: RGB
    timestamp: float = field(default_factory=time.time)
    position: Position | None = None
    hex: str = field(init=False)
    hsl: HSL = field(init=False)

    def __post_init__(self) -> None:
        rgb = tuple(clamp_channel(v) for v in self.rgb)
        if len(rgb) != 3:
            raise ValueError("rgb must have exactly three channels")
        object.__setattr__(self, "rgb", rgb)
        object.__setattr__(self, "hex", rgb_to_hex(*rgb))
        object.__setattr__(self, "hsl", rgb_to_hsl(*rgb))

    @classmethod
    def from_rgb(
        cls,
        r: float,
        g: float,
        b: float,
        position: Position | None = None,
    ) -> SampledColor:
        return cls(rgb=(r, g, b), position=position)

    def rgb_string(self) -> str:
        r, g, b = self.rgb
        return f"rgb({r}, {g}, {b})"

    def hsl_string(self) -> str:
        h, s, l = self.hsl
        return f"hsl({h}, {s}%, {l}%)"

    def to_dict(self) -> dict[str, Any]:
        return {
            "hex": self.hex,
            "rgb": self.rgb_string(),
            "hsl": self.hsl_string(),
        }


@dataclass(frozen=True)
class ScaleFactor:
    """Ratio between two coordinate spaces, e.g. display pixels and surface pixels.

    ``apply`` maps a point from the source space into the target space.
    """

    x: float = 1.0
    y: float = 1.0

    def __post_init__(self) -> None:
        if self.x <= 0 or self.y <= 0:
            raise ValueError("scale factors must be positive")

    @classmethod
    def between(
        cls,
        source_size: tuple[float, float],
        target_size: tuple[float, float],
    ) -> ScaleFactor:
        source_w, source_h = source_size
        target_w, target_h = target_size
        if source_w <= 0 or source_h <= 0:
            raise ValueError("source size must be positive")
        return cls(x=target_w / source_w, y=target_h / source_h)

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return x * self.x, y * self.y

    def scale_length(self, length: float) -> float:
        return length * (self.x + self.y) / 2.0

    def inverse(self) -> ScaleFactor:
        return ScaleFactor(x=1.0 / self.x, y=1.0 / self.y)

    @property
    def is_identity(self) -> bool:
        return self.x == 1.0 and self.y == 1.0


class EditMode(str, Enum):
    EDIT = "edit"
    REMOVE = "remove"


@dataclass(frozen=True)
class EditResult:
    id: str
    url: str
    type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "url": self.url, "type": self.type}
