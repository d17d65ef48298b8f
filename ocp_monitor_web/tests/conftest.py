from __future__ import annotations

import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path

import pytest

from ocp_monitor_web.repositories.manifest_repository import CommandManifestRepository
from ocp_monitor_web.repositories.report_repository import ReportRepository
from ocp_monitor_web.services.monitor_service import MonitorService

MANIFEST_TEXT = """\
# OpenShift monitoring commands
A|oc get clusterversion|Cluster version
A|oc get co|Cluster operators

# Nodes
B|oc get nodes|Nodes
C|oc get pods -n openshift-etcd|etcd pods
B|oc adm top nodes|Node usage
stray line without a separator
"""

# Prologue shared by every stub script: records what the service handed over.
_STUB_PROLOGUE = """\
import os, shutil, sys, time
from pathlib import Path

here = Path(__file__).resolve().parent
capture = here / "capture"
capture.mkdir(exist_ok=True)
(capture / "argv.txt").write_text("\\n".join(sys.argv[1:]))
(capture / "cwd.txt").write_text(os.getcwd())
(capture / "run_id.txt").write_text(os.environ.get("MONITOR_RUN_ID", ""))
(capture / "commands_path.txt").write_text(os.environ["COMMANDS_FILE"])
shutil.copy(os.environ["COMMANDS_FILE"], capture / "commands.list")
reports = here / "reports"
run_id = os.environ.get("MONITOR_RUN_ID", "")
"""


@dataclass
class Workspace:
    root: Path
    script: Path
    manifest: Path
    reports: Path
    scratch: Path

    @property
    def capture(self) -> Path:
        return self.root / "capture"

    def write_stub(self, body: str) -> Path:
        self.script.write_text(_STUB_PROLOGUE + textwrap.dedent(body), encoding="utf-8")
        return self.script

    def temp_manifests(self) -> list[Path]:
        return sorted(self.scratch.glob("temp_commands_*.list"))

    def captured(self, name: str) -> str:
        return (self.capture / name).read_text(encoding="utf-8")


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    manifest = tmp_path / "monitoring_commands_v8.list"
    manifest.write_text(MANIFEST_TEXT, encoding="utf-8")
    reports = tmp_path / "reports"
    reports.mkdir()
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return Workspace(
        root=tmp_path,
        script=tmp_path / "monitor_stub.py",
        manifest=manifest,
        reports=reports,
        scratch=scratch,
    )


def make_service(ws: Workspace, **overrides) -> MonitorService:
    kwargs = dict(
        script_path=ws.script,
        scratch_dir=ws.scratch,
        manifest=CommandManifestRepository(commands_file=ws.manifest),
        report_repo=ReportRepository(reports_dir=ws.reports),
        interpreter=sys.executable,
        timeout_seconds=30,
    )
    kwargs.update(overrides)
    return MonitorService(**kwargs)


@pytest.fixture
def service_factory(workspace: Workspace):
    return lambda **overrides: make_service(workspace, **overrides)
