from __future__ import annotations

import json

from ocp_monitor_web.domain.errors import EmptySelection, InvalidGroup, InvalidMode, MalformedRequest
from ocp_monitor_web.domain.models import MonitorRunRequest, RunMode
from ocp_monitor_web.repositories.manifest_repository import GROUP_ID_RE


def _is_group_id(value) -> bool:
    # fullmatch so a trailing newline cannot slip past "$"
    return isinstance(value, str) and GROUP_ID_RE.fullmatch(value) is not None


def parse_run_request(body: str | bytes | None) -> MonitorRunRequest:
    """
    Validate a run-monitor request body.

    Group ids are the only user input that reaches the filtered manifest, so
    anything but a single uppercase letter is rejected here.
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedRequest("Invalid JSON format") from e

    if not (body or "").strip():
        raise EmptySelection()

    try:
        payload = json.loads(body)
    except ValueError as e:
        raise MalformedRequest("Invalid JSON format") from e

    if payload is None:
        raise EmptySelection()
    if not isinstance(payload, dict):
        raise MalformedRequest("Invalid JSON format")

    raw_groups = payload.get("groups")
    if raw_groups is None:
        raise EmptySelection()
    if not isinstance(raw_groups, list):
        raise MalformedRequest("Invalid JSON format")
    if not raw_groups:
        raise EmptySelection()

    for g in raw_groups:
        if not _is_group_id(g):
            raise InvalidGroup(g)

    raw_mode = payload.get("mode")
    if raw_mode is None:
        mode = RunMode.ACTIONABLE
    else:
        try:
            mode = RunMode(raw_mode)
        except ValueError as e:
            raise InvalidMode(raw_mode) from e

    # Deduplicate preserving order
    seen = set()
    groups = tuple(g for g in raw_groups if not (g in seen or seen.add(g)))

    return MonitorRunRequest(groups=groups, mode=mode)
