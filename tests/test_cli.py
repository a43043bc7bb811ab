"""Tests for the evaldesk CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import yaml
from typer.testing import CliRunner

from evaldesk import __version__
from evaldesk.cli.main import app
from evaldesk.models.result import EvaluationResult, MetricResult, ModelOutput, ModelResult
from evaldesk.service import SAMPLE_REQUEST
from evaldesk.storage.json_store import JobStore


runner = CliRunner()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_project(tmp_path: Path) -> Path:
    """Create a project that submits to the dry-run engine."""
    (tmp_path / "evaldesk.yaml").write_text("engine:\n  name: dry-run\n")
    request = tmp_path / "request.yaml"
    request.write_text(yaml.safe_dump(SAMPLE_REQUEST, sort_keys=False))
    return request


def _invoke(tmp_path: Path, args: list[str]):
    with patch("evaldesk.cli.common.find_project_root", return_value=tmp_path):
        return runner.invoke(app, args)


def _submit(tmp_path: Path) -> str:
    request = _make_project(tmp_path)
    result = _invoke(tmp_path, ["run", str(request), "--json"])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)["data"]


def _complete(tmp_path: Path, job_id: str, bleu: float) -> None:
    store = JobStore(tmp_path)
    job = store.load_job(job_id)
    store.publish_result(
        EvaluationResult(
            job_id=job_id,
            model_results={
                model.id: ModelResult(
                    model_id=model.id,
                    outputs=[ModelOutput(prompt_id=p.id, text="ok") for p in job.prompts],
                    metrics={
                        "bleu": MetricResult(
                            metric_name="bleu",
                            score=bleu,
                            per_prompt_scores={p.id: bleu for p in job.prompts},
                        )
                    },
                )
                for model in job.models
            },
        )
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"evaldesk {__version__}" in result.output


class TestRunCommand:
    """Test evaldesk run."""

    def test_submits_job(self, tmp_path: Path):
        request = _make_project(tmp_path)
        result = _invoke(tmp_path, ["run", str(request)])
        assert result.exit_code == 0, result.output
        assert "Evaluation started" in result.output
        assert len(list((tmp_path / ".evaldesk" / "jobs").glob("*.json"))) == 1

    def test_json_envelope(self, tmp_path: Path):
        job_id = _submit(tmp_path)
        assert (tmp_path / ".evaldesk" / "configs" / f"{job_id}.json").exists()

    def test_model_selection(self, tmp_path: Path):
        request = _make_project(tmp_path)
        result = _invoke(tmp_path, ["run", str(request), "--models", "claude-3", "--json"])
        assert result.exit_code == 0, result.output
        job_id = json.loads(result.stdout)["data"]
        job = JobStore(tmp_path).load_job(job_id)
        assert [m.id for m in job.models] == ["claude-3"]

    def test_unknown_model_selection(self, tmp_path: Path):
        request = _make_project(tmp_path)
        result = _invoke(tmp_path, ["run", str(request), "--models", "nope"])
        assert result.exit_code == 1

    def test_invalid_request_reports_errors(self, tmp_path: Path):
        _make_project(tmp_path)
        bad = tmp_path / "bad.yaml"
        bad.write_text("name: broken\nprompts:\n  - id: p1\n    txet: hi\n")
        result = _invoke(tmp_path, ["run", str(bad)])
        assert result.exit_code == 1
        assert "Did you mean 'text'?" in result.output

    def test_missing_file(self, tmp_path: Path):
        _make_project(tmp_path)
        result = _invoke(tmp_path, ["run", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_watch_times_out(self, tmp_path: Path):
        request = _make_project(tmp_path)
        result = _invoke(
            tmp_path, ["run", str(request), "--watch", "--interval", "0.01", "--timeout", "0.01", "--json"]
        )
        assert result.exit_code == 1
        assert json.loads(result.stdout)["code"] == "POLL_TIMEOUT"

    def test_invalid_project_config(self, tmp_path: Path):
        request = _make_project(tmp_path)
        (tmp_path / "evaldesk.yaml").write_text("engine:\n  nmae: dry-run\n")
        result = _invoke(tmp_path, ["run", str(request)])
        assert result.exit_code == 1
        assert "Invalid evaldesk.yaml" in result.output


class TestStatusCommand:
    def test_running_job(self, tmp_path: Path):
        job_id = _submit(tmp_path)
        result = _invoke(tmp_path, ["status", job_id, "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["data"]["status"] == "running"
        assert payload["data"]["progress"]["percentage"] == 0

    def test_unknown_job(self, tmp_path: Path):
        _make_project(tmp_path)
        result = _invoke(tmp_path, ["status", "missing", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["code"] == "JOB_NOT_FOUND"


class TestResultsCommand:
    def test_pending_results(self, tmp_path: Path):
        job_id = _submit(tmp_path)
        result = _invoke(tmp_path, ["results", job_id])
        assert result.exit_code == 0
        assert "Job is running" in result.output

    def test_csv_to_file(self, tmp_path: Path):
        job_id = _submit(tmp_path)
        _complete(tmp_path, job_id, 0.5)
        out = tmp_path / "results.csv"
        result = _invoke(tmp_path, ["results", job_id, "--format", "csv", "--output", str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_text().splitlines()[0].startswith("job_id,model_id,prompt_id")

    def test_table(self, tmp_path: Path):
        job_id = _submit(tmp_path)
        _complete(tmp_path, job_id, 0.5)
        result = _invoke(tmp_path, ["results", job_id])
        assert result.exit_code == 0
        assert "Metric Scores" in result.output


class TestListCommand:
    def test_lists_jobs(self, tmp_path: Path):
        job_id = _submit(tmp_path)
        result = _invoke(tmp_path, ["list", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["data"]["total"] == 1
        assert payload["data"]["jobs"][0]["id"] == job_id

    def test_bad_status(self, tmp_path: Path):
        _make_project(tmp_path)
        result = _invoke(tmp_path, ["list", "--status", "bogus"])
        assert result.exit_code == 1


class TestCompareAndLeaderboard:
    def test_compare_and_rank(self, tmp_path: Path):
        a = _submit(tmp_path)
        b = _submit(tmp_path)
        _complete(tmp_path, a, 0.4)
        _complete(tmp_path, b, 0.8)

        compared = _invoke(tmp_path, ["compare", a, b, "--format", "json"])
        assert compared.exit_code == 0, compared.output
        payload = json.loads(compared.stdout)
        assert payload["group_by"] == "model"
        assert list(payload["data"]) == ["gpt-3.5", "claude-3"]

        board = _invoke(tmp_path, ["leaderboard", "--provider", "anthropic", "--json"])
        assert board.exit_code == 0
        rankings = json.loads(board.stdout)["data"]["rankings"]
        assert [r["model_id"] for r in rankings] == ["claude-3"]

        summary = _invoke(tmp_path, ["summary", "--json"])
        assert json.loads(summary.stdout)["data"]["completed_jobs"] == 2

    def test_compare_needs_two_jobs(self, tmp_path: Path):
        a = _submit(tmp_path)
        result = _invoke(tmp_path, ["compare", a])
        assert result.exit_code == 1
        assert "VALIDATION_ERROR" in result.output


class TestCatalogAndConfig:
    def test_metrics(self, tmp_path: Path):
        _make_project(tmp_path)
        result = _invoke(tmp_path, ["metrics", "--json"])
        assert "exact_match" in json.loads(result.stdout)["data"]

    def test_providers(self, tmp_path: Path):
        _make_project(tmp_path)
        result = _invoke(tmp_path, ["providers"])
        assert result.exit_code == 0
        assert "anthropic" in result.output

    def test_config_writes_sample(self, tmp_path: Path):
        _make_project(tmp_path)
        out = tmp_path / "sample.yaml"
        result = _invoke(tmp_path, ["config", "--output", str(out)])
        assert result.exit_code == 0
        assert yaml.safe_load(out.read_text())["name"] == "Sample LLM Evaluation"

        again = _invoke(tmp_path, ["config", "--output", str(out)])
        assert again.exit_code == 1

    def test_config_json(self, tmp_path: Path):
        _make_project(tmp_path)
        out = tmp_path / "sample.json"
        result = _invoke(tmp_path, ["config", "--output", str(out)])
        assert result.exit_code == 0
        assert len(json.loads(out.read_text())["prompts"]) == 3
