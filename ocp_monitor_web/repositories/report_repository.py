from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from ocp_monitor_web.domain.models import ReportFile

REPORT_PREFIX = "daily_"
REPORT_SUFFIX = ".html"


def is_report_name(name: str) -> bool:
    return name.startswith(REPORT_PREFIX) and name.endswith(REPORT_SUFFIX)


def _report_files_in(base: Path) -> list[Path]:
    if not base.is_dir():
        return []
    return [p for p in base.iterdir() if p.is_file() and is_report_name(p.name)]


@dataclass
class ReportRepository:
    """
    Repository pattern: encapsulates locating report files written by the monitoring script.
    """
    reports_dir: Path
    url_prefix: str = "/reports"
    max_reports: int = 50

    def url_for(self, name: str) -> str:
        return f"{self.url_prefix.rstrip('/')}/{name}"

    def list_reports(self) -> list[ReportFile]:
        out: list[ReportFile] = []
        for p in _report_files_in(self.reports_dir):
            try:
                st = p.stat()
            except FileNotFoundError:
                # removed between listing and stat
                continue
            out.append(
                ReportFile(
                    name=p.name,
                    size=st.st_size,
                    created=datetime.fromtimestamp(st.st_mtime).strftime("%Y-%m-%d %H:%M:%S"),
                    url=self.url_for(p.name),
                    mtime=st.st_mtime,
                )
            )
        out.sort(key=lambda r: r.mtime, reverse=True)
        return out[: self.max_reports]

    def find_latest(self, run_id: str = "") -> Optional[Path]:
        """
        Newest report by mtime. A report whose name embeds `run_id` wins over
        the plain mtime heuristic.
        """
        stamped: list[tuple[float, Path]] = []
        for p in _report_files_in(self.reports_dir):
            try:
                stamped.append((p.stat().st_mtime, p))
            except FileNotFoundError:
                # removed between listing and stat
                continue
        if not stamped:
            return None
        if run_id:
            tagged = [item for item in stamped if run_id in item[1].name]
            if tagged:
                stamped = tagged
        return max(stamped, key=lambda item: item[0])[1]

    def resolve(self, filename: str) -> Optional[Path]:
        if not is_report_name(filename):
            return None
        base = self.reports_dir.resolve()
        full = (base / filename).resolve()
        if full.parent != base or not full.is_file():
            return None
        return full
