"""Suggestion judge output: rubric verdict for one candidate suggestion."""

from typing import Literal

from pydantic import BaseModel, Field

Recommendation = Literal["accept", "revise", "reject"]


class CriteriaBreakdown(BaseModel):
    """Rubric criteria, each 0-25."""
    authenticity: int = Field(0, ge=0, le=25)
    clarity: int = Field(0, ge=0, le=25)
    ats_relevance: int = Field(0, ge=0, le=25)
    actionability: int = Field(0, ge=0, le=25)


class JudgeResult(BaseModel):
    """Structured verdict of the suggestion judge.

    ``quality_score`` is the model's holistic 0-100 judgment and is kept
    independently of ``criteria_breakdown``; the two are not required to
    agree arithmetically.
    """
    suggestion_id: str
    quality_score: int = Field(0, ge=0, le=100)
    passed: bool = False
    criteria_breakdown: CriteriaBreakdown = CriteriaBreakdown()
    recommendation: Recommendation = "reject"
    reasoning: str = ""
