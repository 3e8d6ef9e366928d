"""Word-level diff chunks and merge outcomes."""

from typing import Literal

from pydantic import BaseModel

from models.schemas.resume import ParsedResume

DiffType = Literal["equal", "insert", "delete"]


class DiffChunk(BaseModel):
    type: DiffType
    value: str


class DiffStats(BaseModel):
    insertions: int = 0  # words
    deletions: int = 0


class SkippedSuggestion(BaseModel):
    suggestion_id: str
    reason: str


class MergeResult(BaseModel):
    resume: ParsedResume
    text: str = ""
    applied: list[str] = []
    skipped: list[SkippedSuggestion] = []
