"""Shared logging utilities."""

import json
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit
from uuid import uuid4

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_FILE = LOG_ROOT / "proxy.log"

SENSITIVE_HEADER_MARKERS = ("key", "authorization", "cookie", "token")


def write_request_log(
    method: str,
    target: str,
    headers: dict[str, str],
    *,
    mode: str,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single outbound request log entry, grouped by target host."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "target": target,
        "header_mode": mode,
        "headers": _redact_headers(headers),
    }
    return _write_json(_host_folder(log_root / "requests", target), payload)


def write_cli_log(
    level: str,
    message: str,
    *,
    log_file: Path | None = None,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file = log_file or CLI_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with log_file.open("a") as f:
        f.write(line)


def clear_logs(log_root: Path = LOG_ROOT) -> None:
    """Remove per-request logs from a previous run."""
    shutil.rmtree(log_root / "requests", ignore_errors=True)


class FileLogger:
    """Headless RequestLogger that only writes log files."""

    def __init__(self, log_root: Path = LOG_ROOT, write_requests: bool = True):
        self.log_root = log_root
        self.write_requests = write_requests

    @property
    def _cli_log(self) -> Path:
        return self.log_root / "proxy.log"

    def log_request(
        self,
        method: str,
        target: str,
        headers: dict[str, str],
        *,
        mode: str,
    ) -> None:
        if self.write_requests:
            write_request_log(method, target, headers, mode=mode, log_root=self.log_root)
        write_cli_log("REQUEST", target, log_file=self._cli_log, method=method, mode=mode)

    def log_response(self, method: str, target: str, status: int) -> None:
        write_cli_log("RESPONSE", target, log_file=self._cli_log, method=method, status=status)

    def log_preflight(self, full: bool) -> None:
        write_cli_log("OPTIONS", "preflight" if full else "bare", log_file=self._cli_log)

    def log_error(self, kind: str, status: int, message: str) -> None:
        write_cli_log("ERROR", message[:200], log_file=self._cli_log, kind=kind, status=status)


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _host_folder(base: Path, target: str) -> Path:
    host = urlsplit(target).hostname
    if host:
        return base / host.replace(":", "_")
    return base


def _redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive headers."""
    redacted = {}
    for key, value in headers.items():
        if any(marker in key.lower() for marker in SENSITIVE_HEADER_MARKERS):
            redacted[key] = _mask(value)
        else:
            redacted[key] = value
    return redacted


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
