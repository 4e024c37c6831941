"""Release monitoring run.

One run lists the releases of the configured repository, picks the newest
tag matching the version prefix, downloads its matching assets when it is
newer than the stored state, records it, and prunes old version
directories.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from release_monitor.config.settings import RunConfiguration
from release_monitor.exceptions import ConfigInvalidError, ReleaseMonitorError
from release_monitor.updater.downloader import AssetDownloader, DownloadResult
from release_monitor.updater.github_client import GitHubClient
from release_monitor.updater.retention import PruneResult, RetentionManager
from release_monitor.updater.state import StateStore
from release_monitor.updater.version import is_newer, select_latest

logger = logging.getLogger("release_monitor.monitor")

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class RunStatus(Enum):
    """How a run ended."""
    UPDATED = "updated"        # New release downloaded and recorded
    UP_TO_DATE = "up_to_date"  # Latest matching release already processed
    NO_MATCH = "no_match"      # No release matches the version prefix
    FAILED = "failed"
    INTERRUPTED = "interrupted"

    @property
    def exit_code(self) -> int:
        """Process exit code for this status."""
        if self == RunStatus.FAILED:
            return EXIT_FAILURE
        if self == RunStatus.INTERRUPTED:
            return EXIT_INTERRUPTED
        return EXIT_SUCCESS


@dataclass
class RunReport:
    """Summary of one monitoring run."""
    status: RunStatus
    latest_tag: Optional[str] = None
    previous_tag: Optional[str] = None
    downloaded_count: int = 0
    removed_dirs: List[Path] = field(default_factory=list)
    prune_failures: int = 0
    error: Optional[BaseException] = None

    @property
    def exit_code(self) -> int:
        """Process exit code for this run."""
        return self.status.exit_code

    @property
    def success(self) -> bool:
        """True if the run did not fail."""
        return self.exit_code == EXIT_SUCCESS


ClientFactory = Callable[[RunConfiguration], GitHubClient]


def _default_client_factory(config: RunConfiguration) -> GitHubClient:
    return GitHubClient(
        owner=config.owner,
        repo=config.repo,
        token=config.token,
        api_url=config.api_url,
        timeout=config.timeout,
    )


class ReleaseMonitor:
    """
    Runs one monitoring pass for a single repository.

    Steps, in order: validate configuration, create directories, list
    releases, select the latest matching tag, compare it with the stored
    state, fetch its asset metadata, download matching assets, commit the
    state, prune old directories. A fatal error stops the run at the step
    where it happened, so state is only committed after every matching
    asset has been written.
    """

    def __init__(
        self,
        config: RunConfiguration,
        client_factory: Optional[ClientFactory] = None,
    ):
        """
        Initialize the monitor.

        Args:
            config: Run configuration
            client_factory: Builds the GitHub client (default: from config)
        """
        self._config = config
        self._client_factory = client_factory or _default_client_factory

    @property
    def config(self) -> RunConfiguration:
        """Configuration this monitor runs with."""
        return self._config

    def run(self) -> RunReport:
        """
        Execute one monitoring pass.

        Never raises for expected failures; the outcome and exit code are
        carried by the returned report.

        Returns:
            RunReport describing the run
        """
        logger.info("Starting GitHub release monitor...")
        try:
            report = self._run()
        except KeyboardInterrupt as e:
            logger.error("Release monitor interrupted")
            return RunReport(status=RunStatus.INTERRUPTED, error=e)
        except ConfigInvalidError as e:
            logger.error("Configuration errors:")
            for error in e.errors:
                logger.error(f"  - {error}")
            return RunReport(status=RunStatus.FAILED, error=e)
        except ReleaseMonitorError as e:
            logger.error(str(e))
            return RunReport(status=RunStatus.FAILED, error=e)

        logger.info("GitHub release monitor finished")
        return report

    def _run(self) -> RunReport:
        config = self._config

        errors = config.validate()
        if errors:
            raise ConfigInvalidError(errors)

        self._ensure_directories()
        state = StateStore(config.state_file)

        with self._client_factory(config) as client:
            releases = client.list_releases()
            latest = select_latest((r.tag_name for r in releases), config.version_prefix)
            if latest is None:
                logger.warning(f"No releases found matching prefix '{config.version_prefix}'")
                return RunReport(status=RunStatus.NO_MATCH)

            current = state.load()
            logger.info(f"Latest release: {latest}")
            logger.info(f"Current version: {current or 'none'}")

            if not is_newer(latest, current):
                logger.info("No new releases available")
                return RunReport(
                    status=RunStatus.UP_TO_DATE, latest_tag=latest, previous_tag=current
                )

            logger.info(f"New release available: {latest}")
            release = client.get_release_by_tag(latest)
            downloader = AssetDownloader(client, config.download_dir, config.asset_pattern)
            result: DownloadResult = downloader.download(latest, release.assets)

        state.save(latest)
        prune = self._prune()

        logger.info("Release update completed successfully")
        return RunReport(
            status=RunStatus.UPDATED,
            latest_tag=latest,
            previous_tag=current,
            downloaded_count=result.downloaded_count,
            removed_dirs=list(prune.removed),
            prune_failures=len(prune.failures),
        )

    def _ensure_directories(self) -> None:
        """Create the download root and the state file's directory."""
        for directory in (self._config.download_dir, self._config.state_file.parent):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ReleaseMonitorError(f"Cannot create directory {directory}", e)

    def _prune(self) -> PruneResult:
        manager = RetentionManager(
            self._config.download_dir,
            self._config.version_prefix,
            self._config.keep_count,
        )
        return manager.prune()
