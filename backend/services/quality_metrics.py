"""Judge quality aggregation and alerting.

``collect_quality_metrics`` turns one run's verdicts into an append-only
``QualityMetricLog``; ``evaluate_quality_health`` pools any number of
logs into a ``QualityHealth``; ``check_and_emit_alerts`` pushes a run's
problems to an injected ``AlertSink``.
"""

import logging
from typing import Literal, Protocol

import numpy as np

from config import settings
from models.schemas.judge_result import JudgeResult
from models.schemas.quality import (
    CriteriaAverages,
    FailureBreakdown,
    QualityHealth,
    QualityMetricLog,
    ScoreDistribution,
)

logger = logging.getLogger(__name__)

# A failed suggestion "fails" a criterion scoring below this
CRITERION_FAILURE_THRESHOLD = 15

NO_DATA_ALERT = "No metrics data available."

AlertLevel = Literal["critical", "warning"]


class AlertSink(Protocol):
    def emit(self, level: AlertLevel, message: str, *, run_id: str = "", section: str = "") -> None: ...


class LoggingAlertSink:
    """Writes alerts to the ``quality.alerts`` logger."""

    def __init__(self, logger_name: str = "quality.alerts") -> None:
        self._logger = logging.getLogger(logger_name)

    def emit(self, level: AlertLevel, message: str, *, run_id: str = "", section: str = "") -> None:
        log_level = logging.CRITICAL if level == "critical" else logging.WARNING
        self._logger.log(log_level, "[quality] run=%s section=%s %s", run_id or "-", section or "-", message)


def _round2(value: float) -> float:
    return round(float(value), 2)


def _distribution(scores: np.ndarray) -> ScoreDistribution:
    counts, _ = np.histogram(scores, bins=[0, 20, 40, 60, 80, np.inf])
    return ScoreDistribution(
        range_0_20=int(counts[0]),
        range_20_40=int(counts[1]),
        range_40_60=int(counts[2]),
        range_60_80=int(counts[3]),
        range_80_100=int(counts[4]),
    )


def collect_quality_metrics(
    results: list[JudgeResult], section: str = "all", run_id: str = ""
) -> QualityMetricLog:
    """Aggregate one run's judge verdicts."""
    total = len(results)
    if total == 0:
        return QualityMetricLog(run_id=run_id, section=section)

    scores = np.array([r.quality_score for r in results], dtype=float)
    passed_mask = np.array([r.passed for r in results], dtype=bool)
    criteria = np.array(
        [
            [
                r.criteria_breakdown.authenticity,
                r.criteria_breakdown.clarity,
                r.criteria_breakdown.ats_relevance,
                r.criteria_breakdown.actionability,
            ]
            for r in results
        ],
        dtype=float,
    )
    means = criteria.mean(axis=0)
    failures = (criteria[~passed_mask] < CRITERION_FAILURE_THRESHOLD).sum(axis=0)
    passed = int(passed_mask.sum())

    log = QualityMetricLog(
        run_id=run_id,
        section=section,
        total_evaluated=total,
        passed=passed,
        failed=total - passed,
        pass_rate=_round2(passed / total * 100),
        avg_score=_round2(scores.mean()),
        score_distribution=_distribution(scores),
        criteria_avg=CriteriaAverages(
            authenticity=_round2(means[0]),
            clarity=_round2(means[1]),
            ats_relevance=_round2(means[2]),
            actionability=_round2(means[3]),
        ),
        failure_breakdown=FailureBreakdown(
            authenticity_failures=int(failures[0]),
            clarity_failures=int(failures[1]),
            ats_failures=int(failures[2]),
            actionability_failures=int(failures[3]),
        ),
    )
    logger.info(
        "Quality metrics run=%s section=%s: %d evaluated, pass rate %.2f%%, avg %.2f",
        run_id, section, total, log.pass_rate, log.avg_score,
    )
    return log


def evaluate_quality_health(logs: list[QualityMetricLog]) -> QualityHealth:
    """Pool logs (weighted by evaluations) and apply the alert thresholds.

    Rules are independent, so one run can raise both a pass-rate and an
    average-score alert.
    """
    logs = [log for log in logs if log.total_evaluated > 0]
    if not logs:
        return QualityHealth(status="healthy", alerts=[NO_DATA_ALERT])

    totals = np.array([log.total_evaluated for log in logs], dtype=float)
    passed = sum(log.passed for log in logs)
    pass_rate = _round2(passed / totals.sum() * 100)
    avg_score = _round2(np.average([log.avg_score for log in logs], weights=totals))

    status = "healthy"
    alerts: list[str] = []
    if pass_rate < settings.quality_critical_pass_rate:
        status = "critical"
        alerts.append(f"CRITICAL: pass rate below {settings.quality_critical_pass_rate:g}%.")
    elif pass_rate < settings.quality_warning_pass_rate:
        status = "warning"
        alerts.append(f"Pass rate below {settings.quality_warning_pass_rate:g}%.")

    if avg_score < settings.quality_warning_avg_score:
        if status == "healthy":
            status = "warning"
        alerts.append(f"Average score below {settings.quality_warning_avg_score:g}.")

    return QualityHealth(status=status, pass_rate=pass_rate, avg_score=avg_score, alerts=alerts)


def check_and_emit_alerts(log: QualityMetricLog, sink: AlertSink | None = None) -> list[str]:
    """Evaluate a single run and emit its alerts. Returns what was emitted."""
    if log.total_evaluated == 0:
        return []
    health = evaluate_quality_health([log])
    if health.status == "healthy":
        return []

    sink = sink or LoggingAlertSink()
    for alert in health.alerts:
        level: AlertLevel = "critical" if alert.startswith("CRITICAL") else "warning"
        sink.emit(level, alert, run_id=log.run_id, section=log.section)
    return health.alerts
