"""Last processed release tag persistence.

The state file holds a single line: the tag of the last release whose
matching assets were all downloaded.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from release_monitor.exceptions import StoreError

logger = logging.getLogger("release_monitor.state")


class StateStore:
    """Reads and atomically writes the last processed tag."""

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the state store.

        Args:
            path: State file location
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Path to the state file."""
        return self._path

    def load(self) -> Optional[str]:
        """
        Load the last processed tag.

        Returns:
            Stored tag, or None if the file does not exist or is empty

        Raises:
            StoreError: If the file exists but cannot be read
        """
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                value = f.read().strip()
        except FileNotFoundError:
            logger.debug(f"No state file at {self._path}")
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(str(self._path), "read", e)

        return value or None

    def save(self, tag: str) -> None:
        """
        Persist a tag, replacing the previous value atomically.

        The tag is written to a temporary file in the same directory and
        renamed over the state file, so readers see either the old or the
        new value.

        Args:
            tag: Tag to store

        Raises:
            StoreError: If the value could not be written
        """
        directory = self._path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(f"{tag}\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            raise StoreError(str(self._path), "write", e)

        logger.info(f"Updated state file with version: {tag}")
