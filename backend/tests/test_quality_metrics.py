import logging

from models.schemas.judge_result import CriteriaBreakdown, JudgeResult
from models.schemas.quality import QualityMetricLog
from services.quality_metrics import (
    NO_DATA_ALERT,
    LoggingAlertSink,
    check_and_emit_alerts,
    collect_quality_metrics,
    evaluate_quality_health,
)


def _result(score: int, passed: bool, criteria=(20, 20, 20, 20)) -> JudgeResult:
    a, c, r, x = criteria
    return JudgeResult(
        suggestion_id=f"s{score}",
        quality_score=score,
        passed=passed,
        criteria_breakdown=CriteriaBreakdown(authenticity=a, clarity=c, ats_relevance=r, actionability=x),
    )


def _log(total: int, passed: int, avg: float, run_id: str = "run") -> QualityMetricLog:
    return QualityMetricLog(
        run_id=run_id,
        total_evaluated=total,
        passed=passed,
        failed=total - passed,
        pass_rate=round(passed / total * 100, 2) if total else 0.0,
        avg_score=avg,
    )


class TestCollect:
    def test_aggregates(self):
        results = [
            _result(90, True),
            _result(75, True),
            _result(40, False, criteria=(10, 20, 12, 20)),
            _result(10, False, criteria=(5, 5, 5, 5)),
        ]
        log = collect_quality_metrics(results, section="experience", run_id="r1")
        assert log.total_evaluated == 4
        assert log.passed == 2
        assert log.failed == 2
        assert log.pass_rate == 50.0
        assert log.avg_score == 53.75
        assert log.section == "experience"
        dist = log.score_distribution
        assert (dist.range_0_20, dist.range_20_40, dist.range_40_60, dist.range_60_80, dist.range_80_100) == (1, 0, 1, 1, 1)
        assert log.criteria_avg.authenticity == 13.75
        assert log.failure_breakdown.authenticity_failures == 2
        assert log.failure_breakdown.clarity_failures == 1
        assert log.failure_breakdown.ats_failures == 2
        assert log.failure_breakdown.actionability_failures == 1

    def test_score_100_in_top_bucket(self):
        log = collect_quality_metrics([_result(100, True)])
        assert log.score_distribution.range_80_100 == 1

    def test_rounding_two_decimals(self):
        log = collect_quality_metrics([_result(70, True), _result(71, True), _result(20, False)])
        assert log.pass_rate == 66.67
        assert log.avg_score == 53.67

    def test_empty(self):
        log = collect_quality_metrics([], run_id="r0")
        assert log.total_evaluated == 0
        assert log.pass_rate == 0.0


class TestHealth:
    def test_no_logs(self):
        health = evaluate_quality_health([])
        assert health.status == "healthy"
        assert health.alerts == [NO_DATA_ALERT]

    def test_healthy(self):
        health = evaluate_quality_health([_log(10, 9, 82.0)])
        assert health.status == "healthy"
        assert health.alerts == []

    def test_critical_with_low_average(self):
        health = evaluate_quality_health([_log(10, 4, 45.0)])
        assert health.status == "critical"
        assert health.pass_rate == 40.0
        assert health.alerts == ["CRITICAL: pass rate below 50%.", "Average score below 65."]

    def test_warning_pass_rate(self):
        health = evaluate_quality_health([_log(10, 6, 70.0)])
        assert health.status == "warning"
        assert health.alerts == ["Pass rate below 70%."]

    def test_warning_average_only(self):
        health = evaluate_quality_health([_log(10, 8, 60.0)])
        assert health.status == "warning"
        assert health.alerts == ["Average score below 65."]

    def test_pooled_and_weighted(self):
        # 1 of 2 passed and 19 of 20 passed -> 20 of 22
        health = evaluate_quality_health([_log(2, 1, 40.0), _log(20, 19, 84.0)])
        assert health.pass_rate == 90.91
        assert health.avg_score == 80.0
        assert health.status == "healthy"

    def test_empty_logs_count_as_no_data(self):
        assert evaluate_quality_health([_log(0, 0, 0.0)]).alerts == [NO_DATA_ALERT]


class TestAlerts:
    def test_healthy_run_emits_nothing(self, alert_sink):
        assert check_and_emit_alerts(_log(10, 9, 85.0), alert_sink) == []
        assert alert_sink.alerts == []

    def test_critical_run(self, alert_sink):
        emitted = check_and_emit_alerts(_log(10, 3, 40.0, run_id="r9"), alert_sink)
        assert len(emitted) == 2
        levels = [level for level, *_ in alert_sink.alerts]
        assert levels == ["critical", "warning"]
        assert all(run_id == "r9" for _, _, run_id, _ in alert_sink.alerts)

    def test_empty_run_emits_nothing(self, alert_sink):
        assert check_and_emit_alerts(_log(0, 0, 0.0), alert_sink) == []
        assert alert_sink.alerts == []

    def test_logging_sink(self, caplog):
        with caplog.at_level(logging.WARNING, logger="quality.alerts"):
            check_and_emit_alerts(_log(10, 6, 80.0, run_id="r2"), LoggingAlertSink())
        [record] = caplog.records
        assert record.levelno == logging.WARNING
        assert "run=r2" in record.getMessage()
        assert "Pass rate below 70%." in record.getMessage()
