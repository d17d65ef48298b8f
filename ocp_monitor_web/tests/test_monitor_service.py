from __future__ import annotations

import os
import time

import pytest

from ocp_monitor_web.domain.errors import ManifestUnreadable, RunInProgress
from ocp_monitor_web.domain.models import MonitorRunRequest, RunMode

WRITES_TAGGED_REPORT = """
print("collecting", flush=True)
(reports / f"daily_{run_id}.html").write_text("<html>ok</html>")
"""


def _selected_lines(commands_text: str) -> list[str]:
    return [ln for ln in commands_text.splitlines() if ln and not ln.startswith("#")]


def test_successful_run_finds_report_and_cleans_up(workspace, service_factory):
    workspace.write_stub(WRITES_TAGGED_REPORT)
    svc = service_factory()

    result = svc.run(MonitorRunRequest(groups=("B",)))

    assert result.success, result.message
    assert result.message == "Monitoring script executed successfully"
    assert result.report_file == f"daily_{result.run_id}.html"
    assert result.report_url == f"/reports/daily_{result.run_id}.html"
    assert "collecting" in result.output
    assert result.exit_code == 0
    assert workspace.temp_manifests() == []


def test_script_receives_flag_cwd_env_and_filtered_manifest(workspace, service_factory):
    workspace.write_stub(WRITES_TAGGED_REPORT)
    svc = service_factory()

    result = svc.run(MonitorRunRequest(groups=("B", "C"), mode=RunMode.VERBOSE))

    assert workspace.captured("argv.txt") == "--verbose=true"
    assert os.path.samefile(workspace.captured("cwd.txt"), workspace.root)
    assert workspace.captured("run_id.txt") == result.run_id

    commands_path = workspace.captured("commands_path.txt")
    assert os.path.isabs(commands_path)
    assert os.path.dirname(commands_path) == str(workspace.scratch.resolve())
    assert os.path.basename(commands_path) == f"temp_commands_{result.run_id}.list"

    commands = workspace.captured("commands.list")
    assert commands.startswith("#!/bin/bash\n# Filtered monitoring commands\n")
    assert "# Groups: B, C" in commands
    assert "# Timestamp: " in commands
    assert "# Nodes" in commands
    assert _selected_lines(commands) == [
        "B|oc get nodes|Nodes",
        "C|oc get pods -n openshift-etcd|etcd pods",
        "B|oc adm top nodes|Node usage",
    ]


def test_default_mode_matches_explicit_actionable(workspace, service_factory):
    workspace.write_stub(WRITES_TAGGED_REPORT)
    svc = service_factory()

    svc.run(MonitorRunRequest(groups=("A",)))
    implicit = (workspace.captured("argv.txt"), _selected_lines(workspace.captured("commands.list")))

    svc.run(MonitorRunRequest(groups=("A",), mode=RunMode.ACTIONABLE))
    explicit = (workspace.captured("argv.txt"), _selected_lines(workspace.captured("commands.list")))

    assert implicit == explicit == ("--verbose=false", ["A|oc get clusterversion|Cluster version", "A|oc get co|Cluster operators"])


def test_group_without_entries_still_runs(workspace, service_factory):
    workspace.write_stub(WRITES_TAGGED_REPORT)
    svc = service_factory()

    result = svc.run(MonitorRunRequest(groups=("Z",)))

    assert result.success
    assert _selected_lines(workspace.captured("commands.list")) == []
    assert workspace.temp_manifests() == []


def test_nonzero_exit_is_failure_with_snippet(workspace, service_factory):
    workspace.write_stub("""
    print("E" * 5000, flush=True)
    sys.exit(4)
    """)
    svc = service_factory()

    result = svc.run(MonitorRunRequest(groups=("A",)))

    assert not result.success
    assert result.message == "Script execution failed with exit code: 4"
    assert result.exit_code == 4
    assert result.output == "E" * 1000
    assert result.report_file is None
    assert workspace.temp_manifests() == []


def test_timeout_kills_script_and_cleans_up(workspace, service_factory):
    workspace.write_stub("""
    print("hanging", flush=True)
    time.sleep(120)
    """)
    svc = service_factory(timeout_seconds=1)

    started = time.monotonic()
    result = svc.run(MonitorRunRequest(groups=("A",)))
    elapsed = time.monotonic() - started

    assert not result.success
    assert result.timed_out
    assert "timed out" in result.message
    assert result.output is None
    assert elapsed < 15
    assert workspace.temp_manifests() == []


def test_missing_script_is_failure_and_cleans_up(workspace, service_factory):
    svc = service_factory()  # no stub written

    result = svc.run(MonitorRunRequest(groups=("A",)))

    assert not result.success
    assert result.message == "Script file not found: monitor_stub.py"
    assert workspace.temp_manifests() == []


def test_start_failure_is_reported(workspace, service_factory):
    workspace.write_stub(WRITES_TAGGED_REPORT)
    svc = service_factory(interpreter=str(workspace.root / "no-such-interpreter"))

    result = svc.run(MonitorRunRequest(groups=("A",)))

    assert not result.success
    assert result.message.startswith("Failed to start monitoring script:")
    assert workspace.temp_manifests() == []


def test_latest_report_fallback_when_name_has_no_run_id(workspace, service_factory):
    old = workspace.reports / "daily_previous.html"
    old.write_text("old")
    past = time.time() - 3600
    os.utime(old, (past, past))
    workspace.write_stub("""
    (reports / "daily_today.html").write_text("new")
    """)
    svc = service_factory()

    result = svc.run(MonitorRunRequest(groups=("A",)))

    assert result.report_file == "daily_today.html"


def test_success_without_any_report(workspace, service_factory):
    workspace.write_stub("print('no report written')")
    svc = service_factory()

    result = svc.run(MonitorRunRequest(groups=("A",)))

    assert result.success
    assert result.report_file is None
    assert result.report_url is None


def test_unreadable_manifest_propagates_without_temp_file(workspace, service_factory):
    workspace.write_stub(WRITES_TAGGED_REPORT)
    workspace.manifest.unlink()
    svc = service_factory()

    with pytest.raises(ManifestUnreadable):
        svc.run(MonitorRunRequest(groups=("A",)))
    assert workspace.temp_manifests() == []


def test_temp_names_do_not_collide(workspace, service_factory, monkeypatch):
    svc = service_factory()
    monkeypatch.setattr("ocp_monitor_web.services.monitor_service.time.time", lambda: 1700000000.0)

    first, first_id = svc._write_filtered_manifest(MonitorRunRequest(groups=("A",)))
    second, second_id = svc._write_filtered_manifest(MonitorRunRequest(groups=("A",)))

    assert first != second
    assert (first_id, second_id) == ("1700000000000", "1700000000001")
    assert len(workspace.temp_manifests()) == 2


def test_exclusive_runs_rejects_overlap(workspace, service_factory):
    workspace.write_stub(WRITES_TAGGED_REPORT)
    svc = service_factory(exclusive_runs=True)

    svc._lock.acquire()
    try:
        with pytest.raises(RunInProgress):
            svc.run(MonitorRunRequest(groups=("A",)))
    finally:
        svc._lock.release()

    assert svc.run(MonitorRunRequest(groups=("A",))).success
    assert workspace.temp_manifests() == []
