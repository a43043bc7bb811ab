"""Engine that shells out to an evaluation CLI.

Invocations:
    <command> run --config <path> --output <dir>
    <command> list-metrics
    <command> list-providers

A non-zero exit status, or "error" anywhere in stderr, is an engine
failure.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Sequence
from pathlib import Path

from evaldesk.engine.base import EvaluationEngine
from evaldesk.errors import EngineInvocationError

logger = logging.getLogger(__name__)

# Listing lines look like "  bleu - BLEU score" or "  ✓ together - Together AI ...".
_LISTING_LINE = re.compile(r"^\s+(?:[✓✗]\s+)?([A-Za-z0-9_\-]+)\s+-\s")

_LIST_TIMEOUT_SECONDS = 30.0


class SubprocessEngine(EvaluationEngine):
    """Run the external engine as a child process."""

    def __init__(
        self,
        command: Sequence[str] = ("eaas",),
        submit_timeout_seconds: float = 600.0,
        detach: bool = False,
    ) -> None:
        if not command:
            raise ValueError("Engine command must not be empty")
        self.command = list(command)
        self.submit_timeout_seconds = submit_timeout_seconds
        self.detach = detach

    def submit(self, config_path: Path, output_dir: Path) -> None:
        args = [*self.command, "run", "--config", str(config_path), "--output", str(output_dir)]
        if self.detach:
            try:
                subprocess.Popen(
                    args,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
            except OSError as exc:
                raise EngineInvocationError(
                    f"Could not start engine: {exc}",
                    operation="submit",
                    details={"command": args},
                ) from exc
            logger.info("Started detached engine run for %s", config_path.name)
            return
        self._run(args, self.submit_timeout_seconds, "submit")

    def list_metrics(self) -> list[str]:
        return parse_listing(self._run([*self.command, "list-metrics"], _LIST_TIMEOUT_SECONDS, "list_metrics"))

    def list_providers(self) -> list[str]:
        return parse_listing(self._run([*self.command, "list-providers"], _LIST_TIMEOUT_SECONDS, "list_providers"))

    def engine_name(self) -> str:
        return "subprocess"

    def _run(self, args: list[str], timeout: float, operation: str) -> str:
        logger.debug("Invoking engine: %s", " ".join(args))
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as exc:
            raise EngineInvocationError(
                f"Engine executable not found: {args[0]}",
                operation=operation,
                details={"command": args},
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise EngineInvocationError(
                f"Engine did not finish within {timeout:g}s",
                operation=operation,
                details={"command": args},
            ) from exc
        except OSError as exc:
            raise EngineInvocationError(
                f"Could not start engine: {exc}",
                operation=operation,
                details={"command": args},
            ) from exc

        stderr = result.stderr or ""
        if result.returncode != 0 or "error" in stderr.lower():
            raise EngineInvocationError(
                f"Engine failed (exit code {result.returncode}): {stderr.strip() or 'no diagnostics'}",
                operation=operation,
                details={"command": args, "returncode": result.returncode},
            )
        return result.stdout


def parse_listing(stdout: str) -> list[str]:
    """Extract names from the engine's indented "name - description" listing."""
    names = []
    for line in stdout.splitlines():
        match = _LISTING_LINE.match(line)
        if match:
            names.append(match.group(1))
    return names
