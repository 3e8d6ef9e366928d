"""Quantification analyzer contracts."""

from typing import Literal

from pydantic import BaseModel

MetricCategory = Literal["numbers", "percentages", "currency", "time_units"]
DensityTier = Literal["low", "moderate", "strong"]


class BulletMetrics(BaseModel):
    """Matched substrings per category; a token lands in at most one."""
    numbers: set[str] = set()
    percentages: set[str] = set()
    currency: set[str] = set()
    time_units: set[str] = set()


class QuantificationAnalysis(BaseModel):
    bullet: str
    has_metrics: bool = False
    metrics: BulletMetrics = BulletMetrics()

    @property
    def categories(self) -> list[str]:
        return [name for name, found in self.metrics if found]


class DensityResult(BaseModel):
    total_bullets: int = 0
    bullets_with_metrics: int = 0
    density: int = 0  # 0-100
    tier: DensityTier = "low"
    by_category: dict[str, int] = {
        "numbers": 0,
        "percentages": 0,
        "currency": 0,
        "time_units": 0,
    }
