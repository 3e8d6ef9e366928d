"""Pydantic contracts shared across the analysis and suggestion pipeline."""

from models.schemas.diff import DiffChunk, DiffStats, MergeResult, SkippedSuggestion
from models.schemas.judge_result import CriteriaBreakdown, JudgeResult
from models.schemas.keywords import ExtractedKeyword, KeywordAnalysisResult, KeywordMatch
from models.schemas.quality import QualityHealth, QualityMetricLog
from models.schemas.quantification import DensityResult, QuantificationAnalysis
from models.schemas.resume import ParsedResume, ResumeItem
from models.schemas.score import CategoryScore, ScoreBreakdown
from models.schemas.suggestion import (
    SectionError,
    StructuralSuggestion,
    Suggestion,
    SuggestionSummary,
    VettedSuggestion,
)

__all__ = [
    "CategoryScore",
    "CriteriaBreakdown",
    "DensityResult",
    "DiffChunk",
    "DiffStats",
    "ExtractedKeyword",
    "JudgeResult",
    "KeywordAnalysisResult",
    "KeywordMatch",
    "MergeResult",
    "ParsedResume",
    "QualityHealth",
    "QualityMetricLog",
    "QuantificationAnalysis",
    "ResumeItem",
    "ScoreBreakdown",
    "SectionError",
    "SkippedSuggestion",
    "StructuralSuggestion",
    "Suggestion",
    "SuggestionSummary",
    "VettedSuggestion",
]
