"""
Persistent sync settings.

Small YAML key-value file, ``~/.nomis/settings.yaml`` by default::

    sync:
      last_sync: "2026-03-02T08:15:00+00:00"
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import yaml

from .codec import as_utc
from .exceptions import LocalPersistenceError

logger = logging.getLogger(__name__)


def default_settings_path() -> Path:
    env_path = os.environ.get("NOMIS_SETTINGS_PATH")
    if env_path:
        return Path(env_path)
    return Path.home() / ".nomis" / "settings.yaml"


class SyncSettings:
    """Holds the high-water mark of the last successful sync."""

    def __init__(self, path: Path | None = None):
        self.path = path or default_settings_path()
        self._data: dict[str, Any] = {}
        self._last_sync: datetime | None = None

    @property
    def last_sync(self) -> datetime | None:
        return self._last_sync

    async def load(self) -> None:
        """Read the settings file. A missing or unreadable file means no settings."""
        if not await aiofiles.os.path.exists(self.path):
            return

        try:
            async with aiofiles.open(self.path) as f:
                content = await f.read()
            data = yaml.safe_load(content) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.path}: {e}")
            return

        self._data = data if isinstance(data, dict) else {}
        section = self._data.get("sync")
        raw = section.get("last_sync") if isinstance(section, dict) else None
        self._last_sync = _parse_timestamp(raw)

    async def set_last_sync(self, value: datetime | None) -> None:
        """Update and persist the high-water mark."""
        self._last_sync = value
        sync_section = self._data.get("sync")
        if not isinstance(sync_section, dict):
            sync_section = self._data["sync"] = {}
        sync_section["last_sync"] = value.isoformat() if value else None
        await self._write()

    async def _write(self) -> None:
        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            async with aiofiles.open(self.path, "w") as f:
                await f.write(yaml.safe_dump(self._data, default_flow_style=False))
        except OSError as e:
            raise LocalPersistenceError("write_settings", str(self.path), e) from e


def _parse_timestamp(raw: Any) -> datetime | None:
    # yaml.safe_load turns unquoted ISO timestamps into datetimes
    if isinstance(raw, datetime):
        return as_utc(raw)
    if isinstance(raw, str):
        try:
            return as_utc(datetime.fromisoformat(raw))
        except ValueError:
            return None
    return None
