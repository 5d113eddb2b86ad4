"""Persistence layer for translation audit records.

Records are kept as one JSON array per UTC day in LOG_DIR.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
import threading
from datetime import datetime, timezone

from fastapi.concurrency import run_in_threadpool

from core import config

_FILE_PREFIX = "translations_"
_FILE_SUFFIX = ".json"
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Serializes read-modify-write of the day files within this process.
_write_lock = threading.Lock()


def log_file_name(day: str) -> str:
    """File name holding the records of one day (YYYY-MM-DD)."""
    return f"{_FILE_PREFIX}{day}{_FILE_SUFFIX}"


def is_valid_day(day: str) -> bool:
    return bool(_DATE_PATTERN.match(day))


def _today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def _read_records(path: str) -> list[dict]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return []
    return data if isinstance(data, list) else []


def _write_records(path: str, records: list[dict]) -> None:
    directory = os.path.dirname(path)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".audit-", suffix=".part")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def _append_sync(record: dict, log_dir: str, day: str) -> str:
    os.makedirs(log_dir, exist_ok=True)
    path = os.path.join(log_dir, log_file_name(day))
    with _write_lock:
        records = _read_records(path)
        records.append(record)
        _write_records(path, records)
    return path


def _list_sync(log_dir: str, day: str | None) -> list[dict]:
    if not os.path.isdir(log_dir):
        return []

    if day is not None:
        return _read_records(os.path.join(log_dir, log_file_name(day)))

    records: list[dict] = []
    for name in sorted(os.listdir(log_dir)):
        if name.startswith(_FILE_PREFIX) and name.endswith(_FILE_SUFFIX):
            records.extend(_read_records(os.path.join(log_dir, name)))
    return records


def log_dir_exists(log_dir: str | None = None) -> bool:
    return os.path.isdir(log_dir or config.LOG_DIR)


async def append_record(
    record: dict, *, log_dir: str | None = None, day: str | None = None
) -> str:
    """Appends one record to the day's file and returns the file path."""
    return await run_in_threadpool(
        _append_sync, record, log_dir or config.LOG_DIR, day or _today()
    )


async def list_records(*, log_dir: str | None = None, day: str | None = None) -> list[dict]:
    """Returns one day's records, or every record when day is None."""
    return await run_in_threadpool(_list_sync, log_dir or config.LOG_DIR, day)
