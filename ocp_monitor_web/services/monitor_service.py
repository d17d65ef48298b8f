from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ocp_monitor_web.domain.errors import RunInProgress
from ocp_monitor_web.domain.models import MonitorRunRequest, MonitorRunResult
from ocp_monitor_web.repositories.manifest_repository import CommandManifestRepository
from ocp_monitor_web.repositories.report_repository import ReportRepository
from ocp_monitor_web.services.process_runner import run_bounded

logger = logging.getLogger(__name__)

COMMANDS_FILE_ENV = "COMMANDS_FILE"
RUN_ID_ENV = "MONITOR_RUN_ID"
TEMP_PREFIX = "temp_commands_"
TEMP_SUFFIX = ".list"


@dataclass
class MonitorService:
    """
    Service layer: one monitoring run = filtered manifest + bounded script
    execution + report discovery. Keeps routes thin.
    """
    script_path: Path
    scratch_dir: Path
    manifest: CommandManifestRepository
    report_repo: ReportRepository
    interpreter: str = "bash"
    timeout_seconds: float = 900
    max_output_bytes: int = 10 * 1024 * 1024
    output_snippet_chars: int = 1000
    exclusive_runs: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def run(self, request: MonitorRunRequest) -> MonitorRunResult:
        if self.exclusive_runs and not self._lock.acquire(blocking=False):
            raise RunInProgress()
        try:
            return self._run(request)
        finally:
            if self.exclusive_runs:
                self._lock.release()

    def _run(self, request: MonitorRunRequest) -> MonitorRunResult:
        logger.info("Executing monitor for groups: %s in mode: %s",
                    ", ".join(request.groups), request.mode.value)

        temp_file = None
        try:
            temp_file, run_id = self._write_filtered_manifest(request)
            return self._execute(request, temp_file, run_id)
        finally:
            if temp_file is not None:
                self._cleanup(temp_file)

    def _write_filtered_manifest(self, request: MonitorRunRequest) -> tuple[Path, str]:
        lines = [
            "#!/bin/bash",
            "# Filtered monitoring commands",
            "# Generated by OpenShift Monitor Web App",
            f"# Groups: {', '.join(request.groups)}",
            f"# Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "",
        ]
        lines += self.manifest.filtered_lines(request.groups)
        content = "\n".join(lines) + "\n"

        self.scratch_dir.mkdir(parents=True, exist_ok=True)
        stamp = int(time.time() * 1000)
        while True:
            run_id = str(stamp)
            path = self.scratch_dir / f"{TEMP_PREFIX}{run_id}{TEMP_SUFFIX}"
            try:
                f = path.open("x", encoding="utf-8")
            except FileExistsError:
                stamp += 1
                continue
            try:
                with f:
                    f.write(content)
            except OSError:
                path.unlink(missing_ok=True)
                raise
            break

        logger.info("Created filtered commands file: %s with %d lines", path.name, len(lines))
        return path, run_id

    def _command(self, request: MonitorRunRequest) -> list[str]:
        cmd = [str(self.script_path), request.mode.verbose_flag]
        if self.interpreter:
            cmd.insert(0, self.interpreter)
        return cmd

    def _snippet(self, output: str) -> str:
        return output[: self.output_snippet_chars]

    def _execute(self, request: MonitorRunRequest, temp_file: Path, run_id: str) -> MonitorRunResult:
        if not self.script_path.is_file():
            logger.error("Script file not found: %s", self.script_path)
            return MonitorRunResult(False, f"Script file not found: {self.script_path.name}", run_id)

        cmd = self._command(request)
        env = dict(os.environ)
        env[COMMANDS_FILE_ENV] = str(temp_file.resolve())
        env[RUN_ID_ENV] = run_id

        logger.info("Executing: %s", " ".join(cmd))
        started = time.monotonic()
        try:
            outcome = run_bounded(
                cmd,
                cwd=self.script_path.parent,
                env=env,
                timeout_seconds=self.timeout_seconds,
                max_output_bytes=self.max_output_bytes,
            )
        except OSError as e:
            logger.exception("Failed to start monitoring script")
            return MonitorRunResult(False, f"Failed to start monitoring script: {e}", run_id)
        duration = time.monotonic() - started

        if outcome.timed_out:
            return MonitorRunResult(
                False,
                f"Script execution timed out after {self.timeout_seconds:g} seconds",
                run_id,
                duration_seconds=duration,
                timed_out=True,
            )

        if outcome.exit_code != 0:
            logger.warning("Script execution failed with exit code: %s", outcome.exit_code)
            return MonitorRunResult(
                False,
                f"Script execution failed with exit code: {outcome.exit_code}",
                run_id,
                output=self._snippet(outcome.output),
                exit_code=outcome.exit_code,
                duration_seconds=duration,
                output_truncated=outcome.output_truncated,
            )

        latest = self.report_repo.find_latest(run_id=run_id)
        report_file = latest.name if latest else None
        report_url = self.report_repo.url_for(latest.name) if latest else None
        logger.info("Script execution completed successfully in %.1fs. Report: %s", duration, report_file)

        return MonitorRunResult(
            True,
            "Monitoring script executed successfully",
            run_id,
            report_file=report_file,
            report_url=report_url,
            output=self._snippet(outcome.output),
            exit_code=0,
            duration_seconds=duration,
            output_truncated=outcome.output_truncated,
        )

    def _cleanup(self, temp_file: Path) -> None:
        try:
            temp_file.unlink(missing_ok=True)
            logger.debug("Cleaned up temporary file: %s", temp_file.name)
        except OSError:
            logger.warning("Could not delete temporary file: %s", temp_file, exc_info=True)
