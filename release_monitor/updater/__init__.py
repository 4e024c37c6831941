"""Updater module for GitHub integration.

This module handles release monitoring:
- Version ordering: compare_versions, is_newer, select_latest
- GitHubClient: GitHub API integration for release listing and assets
- AssetDownloader: Asset download into version directories
- StateStore: Last processed tag persistence
- RetentionManager: Removal of old version directories
"""

from .version import Ordering, compare_versions, is_newer, select_latest, version_sort_key
from .github_client import GitHubClient, GitHubRelease, ReleaseAsset
from .downloader import AssetDownloader, DownloadResult
from .state import StateStore
from .retention import PruneResult, RetentionManager

__all__ = [
    # Version ordering
    "Ordering",
    "compare_versions",
    "is_newer",
    "select_latest",
    "version_sort_key",
    # GitHub client
    "GitHubClient",
    "GitHubRelease",
    "ReleaseAsset",
    # Downloader
    "AssetDownloader",
    "DownloadResult",
    # State
    "StateStore",
    # Retention
    "PruneResult",
    "RetentionManager",
]
