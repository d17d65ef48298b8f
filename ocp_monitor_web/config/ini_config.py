########## ini_config.py

from __future__ import annotations

import os
from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

INI_DEFAULT_NAME = "OpenShiftMonitorWeb.ini"


@dataclass(frozen=True)
class AppSettings:
    script_path: Path
    commands_file: Path
    reports_dir: Path
    scratch_dir: Path

    interpreter: str
    timeout_seconds: float
    max_output_bytes: int
    output_snippet_chars: int
    exclusive_runs: bool

    max_reports: int
    report_url_prefix: str

    flask_host: str
    flask_port: int
    flask_debug: bool
    serve_reports: bool

    log_level: str


class IniConfig:
    """
    Adapter around ConfigParser and filesystem resolution.
    Keeps INI handling out of your app/service code.
    """

    def __init__(self, ini_path: Path):
        self._ini_path = ini_path
        self._cfg = ConfigParser()
        read_ok = self._cfg.read(str(ini_path), encoding="utf-8-sig")
        if not read_ok:
            raise FileNotFoundError(f"INI file not found or unreadable: {ini_path}")

    @staticmethod
    def from_env_or_default() -> "IniConfig":
        ini_raw = (os.getenv("APP_INI") or "").strip()
        # If APP_INI is not set, default to repo-root-relative ini location
        ini_path = Path(ini_raw) if ini_raw else (Path(__file__).resolve().parents[2] / INI_DEFAULT_NAME)
        return IniConfig(ini_path)

    def _cfg_path(self, section: str, key: str, default: Optional[Path] = None) -> Path:
        """
        Reads a filesystem path from INI and resolves it.
        Relative paths are taken relative to the INI file's folder.
        Tries [paths] and [path] interchangeably for convenience.
        """
        sections_to_try = [section]
        if section == "paths":
            sections_to_try.append("path")
        if section == "path":
            sections_to_try.append("paths")

        for sec in sections_to_try:
            if not self._cfg.has_section(sec):
                continue
            raw = (self._cfg.get(sec, key, fallback="") or "").strip()
            if raw:
                p = Path(os.path.expandvars(os.path.expanduser(raw)))
                if not p.is_absolute():
                    p = Path(self._ini_path).resolve().parent / p
                return p.resolve()

        if default is not None:
            return default
        raise FileNotFoundError(f"Missing INI value for {key} in sections: {sections_to_try}")

    def load_settings(self) -> AppSettings:
        # Required paths
        script_path = self._cfg_path("paths", "script_path")
        commands_file = self._cfg_path("paths", "commands_file")
        reports_dir = self._cfg_path("paths", "reports_dir", default=script_path.parent / "reports")
        scratch_dir = self._cfg_path("paths", "scratch_dir", default=script_path.parent)

        # Execution
        interpreter = (self._cfg.get("execution", "interpreter", fallback="bash") or "").strip()
        timeout_seconds = self._cfg.getfloat("execution", "timeout_seconds", fallback=900.0)
        max_output_bytes = self._cfg.getint("execution", "max_output_bytes", fallback=10 * 1024 * 1024)
        output_snippet_chars = self._cfg.getint("execution", "output_snippet_chars", fallback=1000)
        exclusive_runs = self._cfg.getboolean("execution", "exclusive_runs", fallback=False)

        # Reports
        max_reports = self._cfg.getint("reports", "max_reports", fallback=50)
        report_url_prefix = (self._cfg.get("reports", "url_prefix", fallback="/reports") or "").strip() or "/reports"

        # Flask
        flask_host = (self._cfg.get("flask", "host", fallback="127.0.0.1") or "").strip() or "127.0.0.1"
        flask_port = self._cfg.getint("flask", "port", fallback=8080)
        flask_debug = self._cfg.getboolean("flask", "debug", fallback=False)
        serve_reports = self._cfg.getboolean("flask", "serve_reports", fallback=True)

        # Logging
        log_level = (self._cfg.get("logging", "level", fallback="INFO") or "").strip().upper() or "INFO"

        # Validate
        if not commands_file.is_file() or not os.access(commands_file, os.R_OK):
            raise FileNotFoundError(f"Commands file not found or not readable: {commands_file}")
        if timeout_seconds <= 0:
            raise ValueError("execution.timeout_seconds must be positive")
        if max_output_bytes <= 0:
            raise ValueError("execution.max_output_bytes must be positive")

        reports_dir.mkdir(parents=True, exist_ok=True)

        return AppSettings(
            script_path=script_path,
            commands_file=commands_file,
            reports_dir=reports_dir,
            scratch_dir=scratch_dir,
            interpreter=interpreter,
            timeout_seconds=timeout_seconds,
            max_output_bytes=max_output_bytes,
            output_snippet_chars=output_snippet_chars,
            exclusive_runs=exclusive_runs,
            max_reports=max_reports,
            report_url_prefix=report_url_prefix,
            flask_host=flask_host,
            flask_port=flask_port,
            flask_debug=flask_debug,
            serve_reports=serve_reports,
            log_level=log_level,
        )
