# -*- coding: utf-8 -*-
"""
The one place that touches the persisted config file. Everything else works on text.
"""

from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Optional, Union

from .errors import ConfigDirectoryUnavailable, ConfigNotFound
from .sanitize import sanitize_with_notes
from .settings import CONFIG_FILE_NAME, TUN_DNS

logger = logging.getLogger(__name__)


def backup_path(path: Path, now: Optional[_dt.datetime] = None) -> Path:
    ts = (now or _dt.datetime.now()).strftime("%Y%m%d-%H%M%S")
    return path.with_suffix(path.suffix + f".bak.{ts}")


class ConfigStore:
    def __init__(self, directory: Union[str, Path], file_name: str = CONFIG_FILE_NAME) -> None:
        self.directory = Path(directory).expanduser()
        self.path = self.directory / file_name

    def exists(self) -> bool:
        return self.path.is_file()

    def ensure_directory(self) -> None:
        if self.directory.exists() and not self.directory.is_dir():
            raise ConfigDirectoryUnavailable(self.directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigDirectoryUnavailable(self.directory) from e

    def load(self) -> str:
        if not self.exists():
            raise ConfigNotFound(self.path)
        return self.path.read_text(encoding="utf-8")

    def save(self, text: str, backup: bool = False) -> Optional[Path]:
        """
        Write `text` wholesale. With `backup`, the previous file is first copied to
        `<name>.bak.<timestamp>`; that path is returned.
        """
        self.ensure_directory()
        bak = None
        if backup and self.exists():
            bak = backup_path(self.path)
            bak.write_text(self.path.read_text(encoding="utf-8"), encoding="utf-8")
        self.path.write_text(text, encoding="utf-8")
        logger.debug("store: wrote %s (%d chars)", self.path, len(text))
        return bak

    def sanitize(self, tun_dns: str = TUN_DNS) -> bool:
        """Sanitize the stored config in place; returns whether anything changed."""
        original = self.load()
        text, notes = sanitize_with_notes(original, tun_dns)
        if text == original:
            return False
        self.save(text)
        for note in notes:
            logger.info("sanitize: %s", note)
        return True

    def __str__(self) -> str:
        return str(self.path)
