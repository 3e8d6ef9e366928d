"""Judge quality aggregation: per-run metric logs and derived health."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

HealthStatus = Literal["healthy", "warning", "critical"]


class ScoreDistribution(BaseModel):
    range_0_20: int = 0
    range_20_40: int = 0
    range_40_60: int = 0
    range_60_80: int = 0
    range_80_100: int = 0


class CriteriaAverages(BaseModel):
    authenticity: float = 0.0
    clarity: float = 0.0
    ats_relevance: float = 0.0
    actionability: float = 0.0


class FailureBreakdown(BaseModel):
    authenticity_failures: int = 0
    clarity_failures: int = 0
    ats_failures: int = 0
    actionability_failures: int = 0


class QualityMetricLog(BaseModel):
    """Append-only aggregate of one analysis run's judge verdicts."""
    run_id: str = ""
    section: str = "all"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    total_evaluated: int = 0
    passed: int = 0
    failed: int = 0
    pass_rate: float = 0.0  # 0-100
    avg_score: float = 0.0  # 0-100
    score_distribution: ScoreDistribution = ScoreDistribution()
    criteria_avg: CriteriaAverages = CriteriaAverages()
    failure_breakdown: FailureBreakdown = FailureBreakdown()


class QualityHealth(BaseModel):
    """Derived from one or more QualityMetricLogs, never stored."""
    status: HealthStatus = "healthy"
    pass_rate: float = 0.0
    avg_score: float = 0.0
    alerts: list[str] = []
