"""Identity store — string records persisted in ~/.chatdesk/storage.json.

Plays the part of browser local storage: a flat mapping of record
names to serialized strings. The login bootstrap writes the
``personaData`` and ``userData`` records; the view only reads them,
and logout clears everything.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

PERSONA_RECORD = "personaData"
USER_RECORD = "userData"


def _atomic_write(path: Path, content: str) -> None:
    """Write through a temp file in the same directory, then rename over *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


class IdentityStore:
    """Key/value store of serialized records backed by one JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Identity store %s is unreadable; treating as empty", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Identity store %s is not a mapping; treating as empty", self._path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, records: dict[str, str]) -> None:
        _atomic_write(self._path, json.dumps(records, indent=2))

    def get_item(self, name: str) -> str | None:
        return self._read_all().get(name)

    def set_item(self, name: str, value: str) -> None:
        records = self._read_all()
        records[name] = value
        self._write_all(records)

    def remove_item(self, name: str) -> None:
        records = self._read_all()
        if records.pop(name, None) is not None:
            self._write_all(records)

    def clear(self) -> None:
        if self._path.exists():
            self._write_all({})
        logger.info("Cleared identity store %s", self._path)
