"""Suggestion contracts: editable suggestions, structural notes and judged output."""

import uuid
from typing import Literal

from pydantic import BaseModel, Field

from models.schemas.judge_result import JudgeResult

Section = Literal["experience", "education", "projects", "skills", "format"]
SuggestionType = Literal[
    "bullet_rewrite",
    "skill_mapping",
    "action_verb",
    "quantification",
    "skill_expansion",
    "format",
    "removal",
]
SuggestionStatus = Literal["pending", "accepted", "rejected"]
CandidateType = Literal["coop", "fulltime", "career_changer"]

SECTIONS: tuple[str, ...] = ("experience", "education", "projects", "skills", "format")


def _new_id() -> str:
    return str(uuid.uuid4())


class Suggestion(BaseModel):
    """A candidate edit scoped to one (section, item) of the resume."""
    id: str = Field(default_factory=_new_id)
    section: Section
    item_index: int = Field(0, ge=0)
    original_text: str
    suggested_text: str
    suggestion_type: SuggestionType
    reasoning: str = ""
    status: SuggestionStatus = "pending"


class StructuralSuggestion(BaseModel):
    """Read-only layout advice; not part of the accept/reject lifecycle."""
    id: str
    category: Literal["section_order", "section_heading", "section_presence"]
    priority: Literal["critical", "high", "moderate"]
    message: str
    current_state: str
    recommended_action: str


class VettedSuggestion(BaseModel):
    """A generated suggestion together with its judge outcome.

    ``quality_flag`` is "verified" only when the judge ran and passed it.
    Failed or unjudged suggestions stay visible as "unverified".
    """
    suggestion: Suggestion
    judge: JudgeResult | None = None
    quality_flag: Literal["verified", "unverified"] = "unverified"
    judge_error: str | None = None  # error code when the judge call failed
    retryable: bool = False


class SectionError(BaseModel):
    section: str
    code: str
    message: str


class SuggestionSummary(BaseModel):
    total: int = 0
    accepted: int = 0
    rejected: int = 0
    pending: int = 0


class BulkUpdateResult(BaseModel):
    count: int = 0
