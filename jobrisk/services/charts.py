# jobrisk/services/charts.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from .models import SkillImpact

# ---------- Palette ----------
RISK_COLORS = {
    "Low": "#22c55e",     # green
    "Medium": "#eab308",  # amber
    "High": "#ef4444",    # red
}
NEUTRAL_COLOR = "#6366f1"
TRACK_COLOR = "#e2e8f0"

BAR_HIGH = "#ef4444"
BAR_MEDIUM = "#f59e0b"
BAR_LOW = "#3b82f6"

# gauge geometry, SVG user units
GAUGE_WIDTH = 200
GAUGE_HEIGHT = 110
GAUGE_CX = 100
GAUGE_CY = 100
GAUGE_OUTER = 80
GAUGE_INNER = 60


def risk_color(level) -> str:
    return RISK_COLORS.get(level, NEUTRAL_COLOR)


def skill_bar_color(potential: float) -> str:
    if potential > 70:
        return BAR_HIGH
    if potential > 40:
        return BAR_MEDIUM
    return BAR_LOW


def _fmt(n: float) -> str:
    return f"{n:.2f}".rstrip("0").rstrip(".")


def _point(radius: float, fraction: float) -> tuple[float, float]:
    # fraction 0 sits at the left end of the semicircle, 1 at the right
    angle = math.pi * (1 - fraction)
    return GAUGE_CX + radius * math.cos(angle), GAUGE_CY - radius * math.sin(angle)


def _band_path(start: float, end: float) -> str:
    """Closed SVG path for the ring segment between two fractions of the half turn."""
    if end <= start:
        return ""
    ox1, oy1 = _point(GAUGE_OUTER, start)
    ox2, oy2 = _point(GAUGE_OUTER, end)
    ix2, iy2 = _point(GAUGE_INNER, end)
    ix1, iy1 = _point(GAUGE_INNER, start)
    return (
        f"M {_fmt(ox1)} {_fmt(oy1)} "
        f"A {GAUGE_OUTER} {GAUGE_OUTER} 0 0 1 {_fmt(ox2)} {_fmt(oy2)} "
        f"L {_fmt(ix2)} {_fmt(iy2)} "
        f"A {GAUGE_INNER} {GAUGE_INNER} 0 0 0 {_fmt(ix1)} {_fmt(iy1)} Z"
    )


@dataclass(frozen=True)
class Gauge:
    score: float
    level: str
    proportion: float
    color: str
    value_path: str
    track_path: str

    @property
    def label(self) -> str:
        return f"Risk Score: {_fmt(self.score)}/100"

    @property
    def width(self) -> int:
        return GAUGE_WIDTH

    @property
    def height(self) -> int:
        return GAUGE_HEIGHT


def risk_gauge(score: float, level) -> Gauge:
    proportion = min(1.0, max(0.0, float(score) / 100.0))
    return Gauge(
        score=score,
        level=str(level),
        proportion=proportion,
        color=risk_color(level),
        value_path=_band_path(0.0, proportion),
        track_path=_band_path(proportion, 1.0),
    )


@dataclass(frozen=True)
class SkillBar:
    rank: int
    skill: str
    width: float
    color: str
    irreplaceable_value: str


def skill_bars(skills: Iterable[SkillImpact]) -> list[SkillBar]:
    """One bar per skill, in the order given; width is the automation potential in percent."""
    return [
        SkillBar(
            rank=i + 1,
            skill=s.skill,
            width=min(100.0, max(0.0, float(s.automation_potential))),
            color=skill_bar_color(s.automation_potential),
            irreplaceable_value=s.irreplaceable_value,
        )
        for i, s in enumerate(skills)
    ]
