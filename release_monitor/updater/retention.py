"""Retention of downloaded release directories.

Keeps the newest N version directories under the download root, ordered
by release tag ordering rather than modification time.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from release_monitor.exceptions import PruneFailedError
from release_monitor.updater.version import version_sort_key

logger = logging.getLogger("release_monitor.retention")


@dataclass
class PruneResult:
    """Outcome of a prune pass."""
    kept: List[Path] = field(default_factory=list)
    removed: List[Path] = field(default_factory=list)
    failures: List[PruneFailedError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if every excess directory was removed."""
        return not self.failures


class RetentionManager:
    """Deletes the oldest version directories beyond a keep count."""

    def __init__(self, download_dir: Union[str, Path], prefix: str, keep_count: int = 3):
        """
        Initialize the retention manager.

        Args:
            download_dir: Root holding one directory per release tag
            prefix: Only directories whose names start with this are managed
            keep_count: Number of newest directories to keep
        """
        if keep_count < 1:
            raise ValueError(f"keep_count must be at least 1, got {keep_count}")
        self._download_dir = Path(download_dir)
        self._prefix = prefix
        self._keep_count = keep_count

    def list_version_dirs(self) -> List[Path]:
        """
        List managed version directories, oldest first.

        Returns:
            Directories sorted by release tag ordering
        """
        if not self._download_dir.is_dir():
            return []

        dirs = [
            entry for entry in self._download_dir.iterdir()
            if entry.is_dir() and entry.name.startswith(self._prefix)
        ]
        return sorted(dirs, key=lambda p: version_sort_key(p.name))

    def prune(self) -> PruneResult:
        """
        Remove the oldest directories beyond the keep count.

        Listing and removal failures are logged and collected but never raised.

        Returns:
            PruneResult listing kept, removed, and failed directories
        """
        result = PruneResult()

        logger.info(f"Cleaning up old releases (keeping {self._keep_count} most recent)...")

        try:
            dirs = self.list_version_dirs()
        except OSError as e:
            failure = PruneFailedError(str(self._download_dir), e, action="list download directory")
            logger.error(str(failure))
            result.failures.append(failure)
            return result

        if len(dirs) <= self._keep_count:
            logger.info(f"No cleanup needed ({len(dirs)} versions <= {self._keep_count})")
            result.kept = dirs
            return result

        excess = len(dirs) - self._keep_count
        result.kept = dirs[excess:]

        for old_dir in dirs[:excess]:
            logger.info(f"Removing old release directory: {old_dir.name}")
            try:
                shutil.rmtree(old_dir)
                result.removed.append(old_dir)
            except OSError as e:
                failure = PruneFailedError(str(old_dir), e)
                logger.error(str(failure))
                result.failures.append(failure)

        return result
