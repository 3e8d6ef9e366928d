"""Scoring engine output: weighted five-category breakdown."""

from pydantic import BaseModel


class CategoryScore(BaseModel):
    score: int = 0  # 0-100
    weight: float = 0.0
    reason: str = ""
    density: int | None = None  # only on quantification_impact


class ScoreCategories(BaseModel):
    keyword_alignment: CategoryScore
    content_relevance: CategoryScore
    quantification_impact: CategoryScore
    format_structure: CategoryScore
    skills_coverage: CategoryScore


class ScoreBreakdown(BaseModel):
    overall: int = 0  # 0-100
    categories: ScoreCategories
