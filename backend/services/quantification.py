"""Quantification analyzer: detects numeric metrics in resume bullets.

Pure functions, no I/O. Extraction runs percentages -> currency ->
time units -> plain numbers; each pass blanks out what it matched so a
numeric token is counted in exactly one category.
"""

import re

from models.schemas.quantification import (
    BulletMetrics,
    DensityResult,
    DensityTier,
    QuantificationAnalysis,
)
from services.rounding import round_half_up
from services.section_parser import extract_bullets

_SCALE = r"(?:\s?(?:[KMB]\b|k\b|million\b|billion\b|thousand\b|mm\b))"

PERCENTAGE_RE = re.compile(r"\d+(?:[.,]\d+)?\s?(?:%|percent\b)", re.IGNORECASE)
CURRENCY_RE = re.compile(
    rf"(?:[$€£¥]\s?\d[\d,]*(?:\.\d+)?{_SCALE}?\+?"
    rf"|\b\d[\d,]*(?:\.\d+)?{_SCALE}?\s?(?:USD|EUR|GBP|dollars)\b)",
    re.IGNORECASE,
)
TIME_UNIT_RE = re.compile(
    r"\b\d+(?:\.\d+)?\+?\s?(?:-\s?)?"
    r"(?:years?|yrs?|months?|weeks?|days?|hours?|hrs?|minutes?|mins?|seconds?|secs?|ms|quarters?)\b",
    re.IGNORECASE,
)
NUMBER_RE = re.compile(
    rf"\b\d[\d,]*(?:\.\d+)?\+?(?:x\b|{_SCALE})?",
    re.IGNORECASE,
)

# Order matters: earlier passes claim tokens before later ones see them.
_PASSES: list[tuple[str, re.Pattern]] = [
    ("percentages", PERCENTAGE_RE),
    ("currency", CURRENCY_RE),
    ("time_units", TIME_UNIT_RE),
    ("numbers", NUMBER_RE),
]

# Bullets shorter than this carry too little text to judge.
MIN_BULLET_WORDS = 3


def _extract_metrics(text: str) -> BulletMetrics:
    remaining = text
    found: dict[str, set[str]] = {}
    for category, pattern in _PASSES:
        matches = {m.group().strip() for m in pattern.finditer(remaining)}
        found[category] = {m for m in matches if m}
        remaining = pattern.sub(" ", remaining)
    return BulletMetrics(**found)


def analyze_bullet_quantification(bullet: str) -> QuantificationAnalysis:
    """Report which metric categories a single bullet contains."""
    metrics = _extract_metrics(bullet)
    has_metrics = any(values for _, values in metrics)
    return QuantificationAnalysis(bullet=bullet, has_metrics=has_metrics, metrics=metrics)


def has_metrics(bullet: str) -> bool:
    return analyze_bullet_quantification(bullet).has_metrics


def density_tier(density: int) -> DensityTier:
    if density >= 80:
        return "strong"
    if density >= 50:
        return "moderate"
    return "low"


def calculate_density(bullets: list[str]) -> DensityResult:
    """Aggregate quantification across bullets.

    A bullet containing several metric kinds is counted once in
    ``bullets_with_metrics`` but once per kind in ``by_category``.
    """
    by_category = {"numbers": 0, "percentages": 0, "currency": 0, "time_units": 0}
    with_metrics = 0
    for bullet in bullets:
        analysis = analyze_bullet_quantification(bullet)
        if not analysis.has_metrics:
            continue
        with_metrics += 1
        for category in analysis.categories:
            by_category[category] += 1

    total = len(bullets)
    density = round_half_up(with_metrics / total * 100) if total else 0
    return DensityResult(
        total_bullets=total,
        bullets_with_metrics=with_metrics,
        density=density,
        tier=density_tier(density),
        by_category=by_category,
    )


def scorable_bullets(text: str) -> list[str]:
    """Bullets from free text, minus fragments too short to assess."""
    return [b for b in extract_bullets(text) if len(b.split()) >= MIN_BULLET_WORDS]


def calculate_quantification_density(text: str) -> int:
    """Density (0-100) of quantified bullets in raw resume text."""
    if not text.strip():
        return 0
    return calculate_density(scorable_bullets(text)).density
