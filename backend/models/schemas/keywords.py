"""Keyword engine contracts: extracted JD keywords and their resume matches."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

KeywordCategory = Literal[
    "skill", "technology", "qualification", "experience", "soft_skill", "certification"
]
Importance = Literal["high", "medium", "low"]
MatchType = Literal["exact", "variant", "fuzzy"]


class ExtractedKeyword(BaseModel):
    """A keyword pulled once from a job posting."""
    model_config = {"frozen": True}

    text: str
    category: KeywordCategory = "skill"
    importance: Importance = "medium"


class KeywordMatch(BaseModel):
    """One extracted keyword located in the resume."""
    keyword: ExtractedKeyword
    found: bool = True
    match_type: MatchType = "exact"
    matched_text: str = ""  # the variant or resume term that hit
    context: str = ""  # <=100 chars of resume text around the hit


class ImportanceCount(BaseModel):
    matched: int = 0
    total: int = 0


class KeywordAnalysisResult(BaseModel):
    matched: list[KeywordMatch] = []
    missing: list[ExtractedKeyword] = []
    match_rate: int = 0  # 0-100
    by_importance: dict[str, ImportanceCount] = {}
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def matched_keywords(self) -> list[str]:
        return [m.keyword.text for m in self.matched]

    @property
    def missing_keywords(self) -> list[str]:
        return [k.text for k in self.missing]
