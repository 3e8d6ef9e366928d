from pydantic import BaseModel

from models.schemas.diff import DiffChunk, DiffStats, SkippedSuggestion
from models.schemas.keywords import KeywordAnalysisResult
from models.schemas.quality import QualityMetricLog
from models.schemas.quantification import DensityResult
from models.schemas.score import ScoreBreakdown
from models.schemas.suggestion import SectionError, StructuralSuggestion, VettedSuggestion


class SectionAnalysis(BaseModel):
    detected_sections: list[str] = []
    section_order: list[str] = []
    completeness: float = 0.0


class AnalysisResponse(BaseModel):
    score: ScoreBreakdown
    keyword_analysis: KeywordAnalysisResult
    quantification: DensityResult = DensityResult()
    structural_suggestions: list[StructuralSuggestion] = []
    section_analysis: SectionAnalysis = SectionAnalysis()
    experience_years: float = 0.0


class SuggestionPipelineResult(BaseModel):
    run_id: str
    suggestions: list[VettedSuggestion] = []
    failed_sections: list[SectionError] = []
    structural_suggestions: list[StructuralSuggestion] = []
    quality_log: QualityMetricLog = QualityMetricLog()
    alerts: list[str] = []

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_sections)


class GenerateSuggestionsResponse(SuggestionPipelineResult):
    scan_id: str
    saved: int = 0


class DiffResponse(BaseModel):
    chunks: list[DiffChunk] = []
    stats: DiffStats = DiffStats()


class MergeResponse(BaseModel):
    text: str = ""
    applied: list[str] = []
    skipped: list[SkippedSuggestion] = []
