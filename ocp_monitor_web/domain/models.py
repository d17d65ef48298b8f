######## models.py
########

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RunMode(str, Enum):
    ACTIONABLE = "actionable"
    VERBOSE = "verbose"

    @property
    def verbose_flag(self) -> str:
        return "--verbose=true" if self is RunMode.VERBOSE else "--verbose=false"


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    command_count: int

    def to_json(self) -> dict:
        return {"id": self.id, "name": self.name, "commandCount": self.command_count}


@dataclass(frozen=True)
class ReportFile:
    name: str
    size: int
    created: str                # mtime, "%Y-%m-%d %H:%M:%S"
    url: str
    mtime: float

    def to_json(self) -> dict:
        return {"name": self.name, "size": self.size, "created": self.created, "url": self.url}


@dataclass(frozen=True)
class MonitorRunRequest:
    groups: tuple[str, ...]
    mode: RunMode = RunMode.ACTIONABLE


@dataclass(frozen=True)
class MonitorRunResult:
    success: bool
    message: str
    run_id: str
    report_file: Optional[str] = None
    report_url: Optional[str] = None
    output: Optional[str] = None        # first N chars of captured output
    exit_code: Optional[int] = None
    duration_seconds: float = 0.0
    timed_out: bool = False
    output_truncated: bool = False

    def to_json(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "reportFile": self.report_file,
            "reportUrl": self.report_url,
            "output": self.output,
            "runId": self.run_id,
            "exitCode": self.exit_code,
            "durationSeconds": round(self.duration_seconds, 3),
            "timedOut": self.timed_out,
            "outputTruncated": self.output_truncated,
        }
