"""Tests for evaldesk.analysis.aggregation -- cross-job comparisons."""

from __future__ import annotations

from pathlib import Path

import pytest

from evaldesk.analysis.aggregation import AggregationEngine, truncate
from evaldesk.errors import InsufficientJobsError, ValidationError
from evaldesk.models.comparison import GroupBy
from evaldesk.models.job import EvaluationRequest
from evaldesk.models.result import (
    EvaluationResult,
    MetricResult,
    ModelOutput,
    ModelResult,
    PerformanceMetrics,
)
from evaldesk.storage.json_store import JobStore
from evaldesk.tracking.status import StatusResolver


def _make_request(name: str, prompt_text: str = "What is 2+2?") -> EvaluationRequest:
    return EvaluationRequest.model_validate(
        {
            "name": name,
            "prompts": [
                {"id": "p1", "text": prompt_text, "category": "math"},
                {"id": "p2", "text": "Name a colour."},
            ],
            "models": [
                {"id": "m1", "provider": "openai", "model_name": "a"},
                {"id": "m2", "provider": "anthropic", "model_name": "b"},
            ],
            "metrics": [{"name": "bleu"}, {"name": "exact_match"}],
        }
    )


def _make_model_result(
    model_id: str,
    bleu: float,
    exact: float = 1.0,
    latency: float = 100.0,
    success: float = 1.0,
    prompts: tuple[str, ...] = ("p1", "p2"),
) -> ModelResult:
    return ModelResult(
        model_id=model_id,
        outputs=[ModelOutput(prompt_id=p, text=f"{model_id}-{p}") for p in prompts],
        metrics={
            "bleu": MetricResult(
                metric_name="bleu", score=bleu, per_prompt_scores={p: bleu for p in prompts}
            ),
            "exact_match": MetricResult(metric_name="exact_match", score=exact),
        },
        performance=PerformanceMetrics(
            average_latency_ms=latency, total_tokens=50, total_cost_usd=0.01, success_rate=success
        ),
    )


def _publish_job(store: JobStore, name: str, *model_results: ModelResult, prompt_text: str = "What is 2+2?") -> str:
    job_id = store.create(_make_request(name, prompt_text))
    store.publish_result(
        EvaluationResult(job_id=job_id, model_results={mr.model_id: mr for mr in model_results})
    )
    return job_id


def _engine(tmp_path: Path) -> tuple[JobStore, AggregationEngine]:
    store = JobStore(tmp_path)
    return store, AggregationEngine(StatusResolver(store), max_workers=2, max_compare_jobs=3)


class TestCompareValidation:
    """Test request validation before any job is loaded."""

    def test_single_id_rejected(self, tmp_path: Path):
        _, engine = _engine(tmp_path)
        with pytest.raises(ValidationError, match="At least 2 distinct"):
            engine.compare(["a"])

    def test_duplicate_ids_collapse(self, tmp_path: Path):
        _, engine = _engine(tmp_path)
        with pytest.raises(ValidationError):
            engine.compare(["a", "a"])

    def test_too_many_ids_rejected(self, tmp_path: Path):
        _, engine = _engine(tmp_path)
        with pytest.raises(ValidationError, match="At most 3"):
            engine.compare(["a", "b", "c", "d"])

    def test_unknown_group_by(self, tmp_path: Path):
        _, engine = _engine(tmp_path)
        with pytest.raises(ValidationError, match="Unknown group_by"):
            engine.compare(["a", "b"], group_by="provider")

    def test_insufficient_loadable_jobs(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        real = _publish_job(store, "only", _make_model_result("m1", 0.5))
        with pytest.raises(InsufficientJobsError) as exc_info:
            engine.compare([real, "missing"])
        assert exc_info.value.details["loaded"] == [real]


class TestGroupByModel:
    """Test the default model pivot."""

    def test_exactly_two_jobs_succeed(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        a = _publish_job(store, "A", _make_model_result("m1", 0.4))
        b = _publish_job(store, "B", _make_model_result("m1", 0.6))

        comparison = engine.compare([a, b])
        assert [j.name for j in comparison.jobs_compared] == ["A", "B"]
        assert comparison.group_by == GroupBy.model
        assert comparison.metrics_included == ["all"]
        entry = comparison.data["m1"]
        assert [j.job_id for j in entry.jobs] == [a, b]
        assert entry.aggregated_metrics["bleu"] == pytest.approx(0.5)

    def test_performance_summary_averages_per_job(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        a = _publish_job(store, "A", _make_model_result("m1", 0.4, latency=100.0, success=0.8))
        b = _publish_job(store, "B", _make_model_result("m1", 0.6, latency=200.0, success=0.6))

        summary = engine.compare([a, b]).data["m1"].performance_summary
        assert summary.avg_latency_ms == pytest.approx(150.0)
        assert summary.avg_success_rate == pytest.approx(0.7)
        assert summary.total_tokens_processed == 100
        assert summary.evaluations_count == 4

    def test_metric_filter(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        a = _publish_job(store, "A", _make_model_result("m1", 0.4))
        b = _publish_job(store, "B", _make_model_result("m1", 0.6))

        comparison = engine.compare([a, b], metric_filter=["exact_match"])
        assert comparison.metrics_included == ["exact_match"]
        assert list(comparison.data["m1"].aggregated_metrics) == ["exact_match"]

    def test_model_only_in_one_job(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        a = _publish_job(store, "A", _make_model_result("m1", 0.4), _make_model_result("m2", 0.9))
        b = _publish_job(store, "B", _make_model_result("m1", 0.6))

        data = engine.compare([a, b]).data
        assert list(data) == ["m1", "m2"]
        assert len(data["m2"].jobs) == 1
        assert data["m2"].aggregated_metrics["bleu"] == pytest.approx(0.9)

    def test_unfinished_job_contributes_nothing(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        a = _publish_job(store, "A", _make_model_result("m1", 0.4))
        pending = store.create(_make_request("pending"))

        comparison = engine.compare([a, pending])
        assert len(comparison.jobs_compared) == 2
        assert len(comparison.data["m1"].jobs) == 1


class TestGroupByPrompt:
    def test_collects_outputs_and_scores(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        a = _publish_job(store, "A", _make_model_result("m1", 0.4), _make_model_result("m2", 0.8))
        b = _publish_job(store, "B", _make_model_result("m1", 0.6))

        data = engine.compare([a, b], group_by="prompt").data
        assert list(data) == ["p1", "p2"]
        p1 = data["p1"]
        assert p1.category == "math"
        assert [(p.job_id, p.model_id) for p in p1.model_performances] == [(a, "m1"), (a, "m2"), (b, "m1")]
        assert p1.model_performances[0].output.text == "m1-p1"
        assert p1.model_performances[1].metrics == {"bleu": 0.8}

    def test_missing_output_is_omitted(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        a = _publish_job(store, "A", _make_model_result("m1", 0.4, prompts=("p1",)))
        b = _publish_job(store, "B", _make_model_result("m1", 0.6))

        data = engine.compare([a, b], group_by=GroupBy.prompt).data
        assert [p.job_id for p in data["p2"].model_performances] == [b]

    def test_long_prompt_text_truncated(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        long_text = "x" * 150
        a = _publish_job(store, "A", _make_model_result("m1", 0.4), prompt_text=long_text)
        b = _publish_job(store, "B", _make_model_result("m1", 0.6), prompt_text=long_text)

        text = engine.compare([a, b], group_by="prompt").data["p1"].prompt_text
        assert text == "x" * 100 + "..."


    def test_metric_filter_limits_prompt_scores(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        result = _make_model_result("m1", 0.4)
        result.metrics["exact_match"].per_prompt_scores = {"p1": 1.0, "p2": 0.0}
        a = _publish_job(store, "A", result)
        b = _publish_job(store, "B", _make_model_result("m1", 0.6))

        unfiltered = engine.compare([a, b], group_by="prompt").data
        assert unfiltered["p1"].model_performances[0].metrics == {"bleu": 0.4, "exact_match": 1.0}

        filtered = engine.compare([a, b], group_by="prompt", metric_filter=["exact_match"]).data
        assert [p.metrics for p in filtered["p1"].model_performances] == [{"exact_match": 1.0}, {}]

class TestGroupByMetric:
    def test_lists_every_job_model_score(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        a = _publish_job(store, "A", _make_model_result("m1", 0.4), _make_model_result("m2", 0.8))
        b = _publish_job(store, "B", _make_model_result("m1", 0.6))

        data = engine.compare([a, b], group_by="metric", metric_filter=["bleu"]).data
        assert list(data) == ["bleu"]
        assert [(s.job_name, s.model_id, s.score) for s in data["bleu"].model_scores] == [
            ("A", "m1", 0.4),
            ("A", "m2", 0.8),
            ("B", "m1", 0.6),
        ]


    def test_every_metric_without_filter(self, tmp_path: Path):
        store, engine = _engine(tmp_path)
        a = _publish_job(store, "A", _make_model_result("m1", 0.4, exact=0.0))
        b = _publish_job(store, "B", _make_model_result("m1", 0.6))

        comparison = engine.compare([a, b], group_by="metric")
        assert comparison.metrics_included == ["all"]
        assert list(comparison.data) == ["bleu", "exact_match"]
        assert [s.score for s in comparison.data["exact_match"].model_scores] == [0.0, 1.0]

class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("short", 100) == "short"

    def test_exact_limit_unchanged(self):
        assert truncate("a" * 100, 100) == "a" * 100
