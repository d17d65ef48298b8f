from __future__ import annotations

from dataclasses import dataclass

from ocp_monitor_web.domain.categories import category_name
from ocp_monitor_web.domain.models import Category, ReportFile
from ocp_monitor_web.repositories.manifest_repository import CommandManifestRepository
from ocp_monitor_web.repositories.report_repository import ReportRepository


@dataclass
class CatalogService:
    """Read-only listings backing the category tabs and the reports panel."""
    manifest: CommandManifestRepository
    report_repo: ReportRepository

    def list_categories(self) -> list[Category]:
        counts = self.manifest.count_by_group()
        return [
            Category(id=group, name=category_name(group), command_count=counts[group])
            for group in sorted(counts)
        ]

    def list_reports(self) -> list[ReportFile]:
        return self.report_repo.list_reports()
