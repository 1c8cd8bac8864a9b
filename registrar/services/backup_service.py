"""
Timestamped backups of the data directory.
"""

import logging
import os
import shutil
from datetime import datetime
from typing import Optional

from ..core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


class BackupService:
    """Copies the data directory into ``backup_dir/<timestamp>``."""

    def __init__(self, data_dir: str = "data", backup_dir: str = "backups"):
        self._data_dir = data_dir
        self._backup_dir = backup_dir

    @property
    def backup_dir(self) -> str:
        return self._backup_dir

    def perform_backup(self, now: Optional[datetime] = None) -> Optional[str]:
        """Create a backup and return its path, or None if there is no data yet."""
        if not os.path.isdir(self._data_dir):
            logger.info("Data directory %s does not exist. Nothing to back up.", self._data_dir)
            return None

        timestamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
        target_dir = os.path.join(self._backup_dir, timestamp)

        try:
            shutil.copytree(self._data_dir, target_dir, dirs_exist_ok=True)
        except (OSError, shutil.Error) as e:
            raise PersistenceError(f"Backup failed: {e}", error_code="BACKUP_FAILED")

        logger.info("Backup created at %s", os.path.abspath(target_dir))
        return target_dir

    def directory_size(self, path: Optional[str] = None) -> int:
        """Total size in bytes of the regular files below ``path``."""
        root = self._backup_dir if path is None else path
        if not os.path.isdir(root):
            return 0

        size = 0
        for dirpath, _dirnames, filenames in os.walk(root):
            for filename in filenames:
                file_path = os.path.join(dirpath, filename)
                try:
                    if os.path.isfile(file_path):
                        size += os.path.getsize(file_path)
                except OSError:
                    logger.warning("Cannot read size of file: %s", file_path)
        return size
