"""Weighted five-category compatibility score.

Category weights are fixed. ``overall`` is the rounded weighted sum of
category scores, so a breakdown is always self-explaining.
"""

import logging
import re

from models.schemas.keywords import KeywordAnalysisResult
from models.schemas.score import CategoryScore, ScoreBreakdown, ScoreCategories
from models.schemas.suggestion import StructuralSuggestion
from services.errors import ScoringConsistencyError
from services.quantification import density_tier
from services.rounding import round_half_up
from services.section_parser import compute_section_completeness, parse_sections

logger = logging.getLogger(__name__)

CATEGORY_WEIGHTS: dict[str, float] = {
    "keyword_alignment": 0.25,
    "content_relevance": 0.25,
    "quantification_impact": 0.20,
    "format_structure": 0.15,
    "skills_coverage": 0.15,
}
WEIGHT_TOLERANCE = 0.01

# Density at which quantification earns full marks ("strong" tier)
FULL_QUANTIFICATION_DENSITY = 80

# Deducted from format score per structural suggestion
STRUCTURAL_PENALTIES = {"critical": 15, "high": 10, "moderate": 5}

_SKILL_CATEGORIES = {"skill", "technology", "certification"}


def clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def quantification_score(density: int) -> int:
    return clamp_score(density / FULL_QUANTIFICATION_DENSITY * 100)


def _keyword_reason(rate: int, matched: int, total: int) -> str:
    if total == 0:
        return "No keywords were extracted from the job description."
    if rate >= 80:
        tier = "Strong"
    elif rate >= 50:
        tier = "Moderate"
    else:
        tier = "Weak"
    return f"{tier} keyword alignment: {matched} of {total} job keywords found ({rate}%)."


def _quantification_reason(density: int) -> str:
    tier = density_tier(density)
    if tier == "strong":
        return f"Strong quantification: {density}% of bullets include metrics."
    if tier == "moderate":
        return f"Moderate quantification: {density}% of bullets include metrics. Add numbers to the rest."
    return f"Low quantification: only {density}% of bullets include metrics."


def _generic_reason(label: str, score: int) -> str:
    if score >= 80:
        return f"{label} is strong ({score}/100)."
    if score >= 50:
        return f"{label} is adequate ({score}/100) with room to improve."
    return f"{label} needs work ({score}/100)."


def check_weights(categories: ScoreCategories) -> float:
    total = sum(category.weight for _, category in categories)
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ScoringConsistencyError(f"Category weights sum to {total:.3f}, expected 1.0")
    return total


def compute_overall(categories: ScoreCategories) -> int:
    """Rounded weighted sum of category scores."""
    check_weights(categories)
    for name, category in categories:
        if not 0 <= category.score <= 100:
            raise ScoringConsistencyError(f"{name} score {category.score} outside 0-100")
    return round_half_up(sum(category.score * category.weight for _, category in categories))


def compute_score(
    keyword_analysis: KeywordAnalysisResult,
    quantification_density: int,
    content_score: float,
    format_score: float,
    skills_score: float,
) -> ScoreBreakdown:
    """Combine pipeline signals into the weighted breakdown."""
    matched = len(keyword_analysis.matched)
    total = matched + len(keyword_analysis.missing)
    content = clamp_score(content_score)
    fmt = clamp_score(format_score)
    skills = clamp_score(skills_score)
    density = max(0, min(100, quantification_density))

    categories = ScoreCategories(
        keyword_alignment=CategoryScore(
            score=clamp_score(keyword_analysis.match_rate),
            weight=CATEGORY_WEIGHTS["keyword_alignment"],
            reason=_keyword_reason(keyword_analysis.match_rate, matched, total),
        ),
        content_relevance=CategoryScore(
            score=content,
            weight=CATEGORY_WEIGHTS["content_relevance"],
            reason=_generic_reason("Content relevance to the role", content),
        ),
        quantification_impact=CategoryScore(
            score=quantification_score(density),
            weight=CATEGORY_WEIGHTS["quantification_impact"],
            reason=_quantification_reason(density),
            density=density,
        ),
        format_structure=CategoryScore(
            score=fmt,
            weight=CATEGORY_WEIGHTS["format_structure"],
            reason=_generic_reason("Format and structure", fmt),
        ),
        skills_coverage=CategoryScore(
            score=skills,
            weight=CATEGORY_WEIGHTS["skills_coverage"],
            reason=_generic_reason("Skills coverage", skills),
        ),
    )
    overall = compute_overall(categories)
    logger.info(
        "Score computed: overall=%d (keywords=%d content=%d quant=%d format=%d skills=%d)",
        overall,
        categories.keyword_alignment.score,
        content,
        categories.quantification_impact.score,
        fmt,
        skills,
    )
    return ScoreBreakdown(overall=overall, categories=categories)


# ---------------------------------------------------------------------------
# Local category signals
# ---------------------------------------------------------------------------

def skills_coverage_score(keyword_analysis: KeywordAnalysisResult) -> int:
    """Match rate restricted to skill, technology and certification keywords."""
    matched = sum(1 for m in keyword_analysis.matched if m.keyword.category in _SKILL_CATEGORIES)
    missing = sum(1 for k in keyword_analysis.missing if k.category in _SKILL_CATEGORIES)
    if matched + missing == 0:
        return keyword_analysis.match_rate
    return round_half_up(matched / (matched + missing) * 100)


def content_relevance_score(bullets: list[str], keyword_analysis: KeywordAnalysisResult) -> int:
    """Share of bullets that mention a matched keyword, blended with match rate."""
    if not bullets:
        return keyword_analysis.match_rate
    terms = {m.matched_text.lower() for m in keyword_analysis.matched if m.matched_text}
    terms |= {m.keyword.text.lower() for m in keyword_analysis.matched}
    patterns = [re.compile(rf"(?<!\w){re.escape(t)}(?!\w)", re.IGNORECASE) for t in terms]
    relevant = sum(1 for b in bullets if any(p.search(b) for p in patterns))
    share = relevant / len(bullets) * 100
    return clamp_score(0.6 * share + 0.4 * keyword_analysis.match_rate)


def format_structure_score(
    resume_text: str, structural: list[StructuralSuggestion] | None = None
) -> int:
    """Weighted section completeness minus structural penalties."""
    completeness = compute_section_completeness(parse_sections(resume_text)) * 100
    penalty = sum(STRUCTURAL_PENALTIES[s.priority] for s in structural or [])
    return clamp_score(completeness - penalty)
