from __future__ import annotations

import logging
import os
from typing import Optional

from flask import Flask

from ocp_monitor_web.config.ini_config import AppSettings, IniConfig
from ocp_monitor_web.repositories.manifest_repository import CommandManifestRepository
from ocp_monitor_web.repositories.report_repository import ReportRepository
from ocp_monitor_web.services.catalog_service import CatalogService
from ocp_monitor_web.services.monitor_service import MonitorService
from ocp_monitor_web.web.routes import create_blueprint, create_reports_blueprint

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Optional[AppSettings] = None) -> Flask:
    if settings is None:
        settings = IniConfig.from_env_or_default().load_settings()

    _configure_logging(settings.log_level)

    if not settings.script_path.is_file() or not os.access(settings.script_path, os.R_OK):
        # not fatal: each run reports the missing script as a failure
        logger.warning("Script file not found or not readable: %s", settings.script_path)

    manifest = CommandManifestRepository(commands_file=settings.commands_file)

    report_repo = ReportRepository(
        reports_dir=settings.reports_dir,
        url_prefix=settings.report_url_prefix,
        max_reports=settings.max_reports,
    )

    catalog_service = CatalogService(manifest=manifest, report_repo=report_repo)

    monitor_service = MonitorService(
        script_path=settings.script_path,
        scratch_dir=settings.scratch_dir,
        manifest=manifest,
        report_repo=report_repo,
        interpreter=settings.interpreter,
        timeout_seconds=settings.timeout_seconds,
        max_output_bytes=settings.max_output_bytes,
        output_snippet_chars=settings.output_snippet_chars,
        exclusive_runs=settings.exclusive_runs,
    )

    app = Flask(__name__)
    app.json.sort_keys = False
    app.register_blueprint(create_blueprint(catalog_service, monitor_service))
    if settings.serve_reports:
        app.register_blueprint(create_reports_blueprint(report_repo))

    app.config["HOST"] = settings.flask_host
    app.config["PORT"] = settings.flask_port
    app.config["DEBUG"] = settings.flask_debug

    logger.info("Script: %s", settings.script_path)
    logger.info("Commands file: %s", settings.commands_file)
    logger.info("Reports directory: %s", settings.reports_dir)

    return app
