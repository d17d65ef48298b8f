from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from ocp_monitor_web.domain.errors import ManifestUnreadable

GROUP_ID_RE = re.compile(r"^[A-Z]$")


def is_comment_or_blank(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def leading_group(line: str) -> Optional[str]:
    """Category field of a pipe-delimited command line, or None for anything else."""
    if is_comment_or_blank(line) or "|" not in line:
        return None
    return line.split("|", 1)[0].strip()


def filter_lines(lines: Iterable[str], groups: Iterable[str]) -> list[str]:
    """
    Keep comment/blank lines verbatim plus command lines tagged with one of
    `groups`, preserving the original order.
    """
    selected = set(groups)
    out: list[str] = []
    for line in lines:
        if is_comment_or_blank(line):
            out.append(line)
        elif leading_group(line) in selected:
            out.append(line)
    return out


@dataclass
class CommandManifestRepository:
    """
    Repository pattern: read-only access to the master command manifest.
    """
    commands_file: Path

    def read_lines(self) -> list[str]:
        try:
            return self.commands_file.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestUnreadable(f"Commands file not readable: {self.commands_file.name}") from e

    def count_by_group(self) -> dict[str, int]:
        counts: Counter[str] = Counter()
        for line in self.read_lines():
            group = leading_group(line)
            if group and GROUP_ID_RE.match(group):
                counts[group] += 1
        return dict(counts)

    def filtered_lines(self, groups: Iterable[str]) -> list[str]:
        return filter_lines(self.read_lines(), groups)
