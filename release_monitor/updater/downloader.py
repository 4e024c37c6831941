"""Release asset downloader.

Downloads the assets of one release whose names match a pattern into a
version-scoped directory under the download root.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Union

from release_monitor.exceptions import DownloadFailedError, ReleaseMonitorError
from release_monitor.updater.github_client import GitHubClient, ReleaseAsset

logger = logging.getLogger("release_monitor.downloader")

PARTIAL_SUFFIX = ".part"


@dataclass
class DownloadResult:
    """Outcome of downloading one release."""
    tag: str
    release_dir: Path
    downloaded: List[Path] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def downloaded_count(self) -> int:
        """Number of assets written to disk."""
        return len(self.downloaded)


def version_dir_name(tag: str) -> str:
    """
    Directory name for a release tag.

    Path separators are replaced so every tag maps to a single directory
    directly under the download root.
    """
    name = tag.replace("/", "_").replace("\\", "_")
    if name in (".", ".."):
        name = name.replace(".", "_")
    return name


def _is_plain_file_name(name: str) -> bool:
    if not name or name in (".", ".."):
        return False
    if "/" in name or "\\" in name:
        return False
    return os.path.basename(name) == name


class AssetDownloader:
    """Downloads matching release assets to <root>/<tag>/<asset name>."""

    def __init__(
        self,
        client: GitHubClient,
        download_dir: Union[str, Path],
        asset_pattern: Union[str, "re.Pattern[str]"] = ".*",
    ):
        """
        Initialize the downloader.

        Args:
            client: Client used to fetch asset bytes
            download_dir: Root directory for version directories
            asset_pattern: Regular expression an asset name must match
        """
        self._client = client
        self._download_dir = Path(download_dir)
        self._pattern = re.compile(asset_pattern) if isinstance(asset_pattern, str) else asset_pattern

    def get_release_dir(self, tag: str) -> Path:
        """Get the directory for a specific release tag."""
        return self._download_dir / version_dir_name(tag)

    def matches(self, asset_name: str) -> bool:
        """True if the asset name matches the configured pattern."""
        return self._pattern.search(asset_name) is not None

    def download(self, tag: str, assets: Sequence[ReleaseAsset]) -> DownloadResult:
        """
        Download every matching asset of a release.

        Either all matching assets are written or DownloadFailedError is
        raised. Files already written for this tag are left in place and
        overwritten by the next attempt.

        Args:
            tag: Release tag
            assets: Assets listed in the release metadata

        Returns:
            DownloadResult with the written files and skipped asset names

        Raises:
            DownloadFailedError: If any matching asset fails to transfer
        """
        release_dir = self.get_release_dir(tag)
        result = DownloadResult(tag=tag, release_dir=release_dir)

        selected: List[ReleaseAsset] = []
        for asset in assets:
            if self.matches(asset.name):
                selected.append(asset)
            else:
                logger.info(f"Skipping asset {asset.name} (doesn't match pattern)")
                result.skipped.append(asset.name)

        try:
            release_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DownloadFailedError(None, tag, e)

        if not selected:
            logger.warning(
                f"No assets matching pattern '{self._pattern.pattern}' found for release {tag}"
            )
            return result

        for asset in selected:
            result.downloaded.append(self._download_one(tag, asset, release_dir))

        logger.info(f"Downloaded {result.downloaded_count} assets for {tag} to {release_dir}")
        return result

    def _download_one(self, tag: str, asset: ReleaseAsset, release_dir: Path) -> Path:
        """Download a single asset via a .part file, then rename into place."""
        if not _is_plain_file_name(asset.name):
            raise DownloadFailedError(
                asset.name, tag, ValueError("asset name is not a plain file name")
            )

        target = release_dir / asset.name
        partial = release_dir / f"{asset.name}{PARTIAL_SUFFIX}"

        logger.info(f"Downloading asset: {asset.name}")
        try:
            self._client.download_asset(asset, partial)
            os.replace(partial, target)
        except (ReleaseMonitorError, OSError) as e:
            logger.error(f"Failed to download: {asset.name}")
            raise DownloadFailedError(asset.name, tag, e)

        logger.info(f"Successfully downloaded: {asset.name}")
        return target
