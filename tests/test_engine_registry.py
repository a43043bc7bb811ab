"""Tests for the engine registry (get_engine and engine_from_settings)."""

from __future__ import annotations

import types
from pathlib import Path
from unittest.mock import patch

import pytest

from evaldesk.engine.base import EvaluationEngine
from evaldesk.engine.dry_run import DryRunEngine
from evaldesk.engine.registry import engine_from_settings, get_engine
from evaldesk.engine.subprocess_engine import SubprocessEngine
from evaldesk.models.config import EngineSettings


# --- Test engine for dotted-path tests ---


class _TestEngine(EvaluationEngine):
    """A valid test engine for dotted-path loading tests."""

    def submit(self, config_path: Path, output_dir: Path) -> None:
        return None

    def list_metrics(self) -> list[str]:
        return ["custom_metric"]

    def list_providers(self) -> list[str]:
        return ["custom"]


class _NotAnEngine:
    """Not an EvaluationEngine subclass -- used to test type validation."""

    pass


# --- Registry tests ---


class TestGetEngineBuiltin:
    """Test builtin engine name resolution."""

    def test_subprocess(self) -> None:
        engine = get_engine("subprocess", command=["my-eaas"])
        assert isinstance(engine, SubprocessEngine)
        assert engine.command == ["my-eaas"]

    def test_dry_run(self) -> None:
        engine = get_engine("dry-run")
        assert isinstance(engine, DryRunEngine)

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown engine 'nope'"):
            get_engine("nope")


class TestGetEngineDottedPath:
    """Test custom dotted-path engine loading."""

    def test_custom_dotted_path(self) -> None:
        mock_module = types.ModuleType("tests.test_engine_registry")
        mock_module._TestEngine = _TestEngine  # type: ignore[attr-defined]

        with patch("importlib.import_module", return_value=mock_module):
            engine = get_engine("tests.test_engine_registry._TestEngine")

        assert isinstance(engine, _TestEngine)
        assert engine.engine_name() == "_TestEngine"

    def test_missing_class(self) -> None:
        mock_module = types.ModuleType("some.module")
        with patch("importlib.import_module", return_value=mock_module):
            with pytest.raises(ImportError, match="has no attribute 'Missing'"):
                get_engine("some.module.Missing")

    def test_not_a_subclass(self) -> None:
        mock_module = types.ModuleType("some.module")
        mock_module._NotAnEngine = _NotAnEngine  # type: ignore[attr-defined]
        with patch("importlib.import_module", return_value=mock_module):
            with pytest.raises(TypeError, match="not a subclass of EvaluationEngine"):
                get_engine("some.module._NotAnEngine")


class TestEngineFromSettings:
    def test_subprocess_settings_forwarded(self) -> None:
        settings = EngineSettings(command=["eaas", "--quiet"], submit_timeout_seconds=30, detach=True)
        engine = engine_from_settings(settings)
        assert isinstance(engine, SubprocessEngine)
        assert engine.command == ["eaas", "--quiet"]
        assert engine.submit_timeout_seconds == 30
        assert engine.detach is True

    def test_dry_run_catalog(self) -> None:
        engine = engine_from_settings(EngineSettings(name="dry-run", metrics=["bleu"]))
        assert engine.list_metrics() == ["bleu"]
