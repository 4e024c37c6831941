"""GitHub API client for release monitoring.

Lists releases of a repository, fetches a single release by tag, and
streams release assets to disk.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import quote

import requests

from release_monitor.exceptions import (
    SourceAuthError,
    SourceMalformedError,
    SourceNotFoundError,
    SourceRateLimitError,
    SourceRejectedError,
    SourceUnavailableError,
)

logger = logging.getLogger("release_monitor.github_client")


# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"
USER_AGENT = "github-release-monitor/1.0"
RELEASES_PER_PAGE = 100
MAX_PAGES = 10

# Request timeout in seconds
REQUEST_TIMEOUT = 30

# Streaming chunk size for asset downloads
CHUNK_SIZE = 64 * 1024


def _require_str(data: dict, key: str, url: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise SourceMalformedError(url, f"missing or invalid '{key}'")
    return value


@dataclass(frozen=True)
class ReleaseAsset:
    """Represents a downloadable asset from a GitHub release."""
    name: str
    download_url: str
    size: int = 0
    content_type: str = ""

    @classmethod
    def from_api_response(cls, data: Any, url: str = "") -> "ReleaseAsset":
        """
        Create ReleaseAsset from GitHub API response.

        The API URL is preferred over browser_download_url since it
        serves private repositories when asked for application/octet-stream.

        Raises:
            SourceMalformedError: If name or download location is missing
        """
        if not isinstance(data, dict):
            raise SourceMalformedError(url, "asset entry is not an object")
        name = _require_str(data, "name", url)
        download_url = data.get("url") or data.get("browser_download_url")
        if not isinstance(download_url, str) or not download_url:
            raise SourceMalformedError(url, f"asset '{name}' has no download URL")
        size = data.get("size", 0)
        return cls(
            name=name,
            download_url=download_url,
            size=size if isinstance(size, int) else 0,
            content_type=data.get("content_type") or "",
        )


@dataclass
class GitHubRelease:
    """Represents a GitHub release with its assets."""
    tag_name: str
    name: str = ""
    published_at: Optional[datetime] = None
    html_url: str = ""
    assets: List[ReleaseAsset] = field(default_factory=list)
    prerelease: bool = False
    draft: bool = False

    def get_asset(self, name: str) -> Optional[ReleaseAsset]:
        """Get asset by name."""
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None

    @classmethod
    def from_api_response(cls, data: Any, url: str = "") -> "GitHubRelease":
        """
        Create GitHubRelease from GitHub API response.

        Raises:
            SourceMalformedError: If the record is not release-shaped
        """
        if not isinstance(data, dict):
            raise SourceMalformedError(url, "release entry is not an object")

        tag_name = _require_str(data, "tag_name", url)

        published_at = None
        if data.get("published_at"):
            try:
                published_at = datetime.fromisoformat(
                    data["published_at"].replace("Z", "+00:00")
                )
            except (ValueError, TypeError, AttributeError):
                pass

        raw_assets = data.get("assets") or []
        if not isinstance(raw_assets, list):
            raise SourceMalformedError(url, f"assets of {tag_name} is not a list")
        assets = [ReleaseAsset.from_api_response(a, url) for a in raw_assets]

        return cls(
            tag_name=tag_name,
            name=data.get("name") or "",
            published_at=published_at,
            html_url=data.get("html_url") or "",
            assets=assets,
            prerelease=bool(data.get("prerelease", False)),
            draft=bool(data.get("draft", False)),
        )


class GitHubClient:
    """Client for the releases API of a single repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: Optional[str] = None,
        api_url: str = GITHUB_API_BASE,
        timeout: int = REQUEST_TIMEOUT,
    ):
        """
        Initialize GitHub client.

        Args:
            owner: Repository owner (user or organization)
            repo: Repository name
            token: Bearer credential for private repositories
            api_url: API base URL (GitHub Enterprise or a test server)
            timeout: Request timeout in seconds
        """
        self.owner = owner
        self.repo = repo
        self._timeout = timeout
        self._releases_url = f"{api_url.rstrip('/')}/repos/{owner}/{repo}/releases"
        self._session = requests.Session()
        self._session.headers.update({
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
        })
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    @property
    def releases_url(self) -> str:
        """Releases endpoint of the monitored repository."""
        return self._releases_url

    def _check_response(self, response: requests.Response, url: str) -> None:
        """
        Raise the matching error for a non-success response.

        Raises:
            SourceAuthError: 401, or 403 without rate limiting
            SourceRateLimitError: 429, or 403 with exhausted rate limit
            SourceNotFoundError: 404
            SourceRejectedError: Any other non-2xx status
        """
        status = response.status_code
        if 200 <= status < 300:
            return

        text = response.text or ""
        if status == 404:
            raise SourceNotFoundError(url, status, "repository or release not found")
        if status == 429 or (
            status == 403 and (
                response.headers.get("X-RateLimit-Remaining") == "0"
                or "rate limit" in text.lower()
            )
        ):
            raise SourceRateLimitError(url, status, "API rate limit exceeded")
        if status in (401, 403):
            raise SourceAuthError(url, status, "check the configured token")
        raise SourceRejectedError(url, status, text[:200])

    def _get(self, url: str, **kwargs) -> requests.Response:
        """
        Issue a GET request, translating transport failures.

        Raises:
            SourceUnavailableError: If the request could not complete
        """
        try:
            logger.debug(f"Making request to: {url}")
            return self._session.get(url, timeout=self._timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            logger.error("GitHub request timed out")
            raise SourceUnavailableError(url, e)
        except requests.exceptions.RequestException as e:
            logger.error(f"GitHub connection error: {e}")
            raise SourceUnavailableError(url, e)

    def _get_json(self, url: str, params: Optional[dict] = None) -> tuple:
        """
        GET a JSON document.

        Returns:
            Tuple of (decoded JSON, response)

        Raises:
            SourceUnavailableError: If unable to connect
            SourceRejectedError: On non-success status
            SourceMalformedError: If the body is not JSON
        """
        response = self._get(url, params=params)
        self._check_response(response, url)
        try:
            return response.json(), response
        except ValueError as e:
            raise SourceMalformedError(url, "body is not valid JSON", e)

    def list_releases(self, max_pages: int = MAX_PAGES) -> List[GitHubRelease]:
        """
        List published releases of the repository.

        Follows pagination links. Draft releases are skipped since they
        cannot be fetched by tag.

        Args:
            max_pages: Upper bound on pages requested

        Returns:
            List of GitHubRelease objects, in API order

        Raises:
            SourceUnavailableError: If unable to connect
            SourceRejectedError: On non-success status
            SourceMalformedError: If the payload is not a release list
        """
        logger.info(f"Fetching releases for {self.owner}/{self.repo}")

        releases: List[GitHubRelease] = []
        url: Optional[str] = self._releases_url
        params: Optional[dict] = {"per_page": RELEASES_PER_PAGE}
        pages = 0

        while url and pages < max_pages:
            data, response = self._get_json(url, params=params)
            if not isinstance(data, list):
                raise SourceMalformedError(url, "expected a list of releases")

            for item in data:
                release = GitHubRelease.from_api_response(item, url)
                if release.draft:
                    logger.debug(f"Skipping draft release {release.tag_name}")
                    continue
                releases.append(release)

            pages += 1
            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            params = None

        if url:
            logger.warning(
                f"Stopped listing releases after {max_pages} pages; "
                f"older releases of {self.owner}/{self.repo} were not considered"
            )

        logger.info(f"Found {len(releases)} releases")
        return releases

    def get_release_by_tag(self, tag: str) -> GitHubRelease:
        """
        Get a specific release by tag name.

        Args:
            tag: Release tag (e.g., "v1.0.0")

        Returns:
            GitHubRelease for the specified tag

        Raises:
            SourceNotFoundError: If release not found
            SourceUnavailableError: If unable to connect
            SourceMalformedError: If the payload is not a release
        """
        url = f"{self._releases_url}/tags/{quote(tag, safe='')}"
        logger.info(f"Fetching release with tag: {tag}")

        data, _ = self._get_json(url)
        release = GitHubRelease.from_api_response(data, url)

        logger.info(f"Found release {release.tag_name} with {len(release.assets)} assets")
        return release

    def download_asset(self, asset: ReleaseAsset, destination: Path) -> int:
        """
        Stream a release asset to a file.

        Args:
            asset: ReleaseAsset to download
            destination: File path to write

        Returns:
            Number of bytes written

        Raises:
            SourceUnavailableError: If unable to connect or the stream breaks
            SourceRejectedError: On non-success status
            OSError: If the destination cannot be written
        """
        logger.debug(f"Downloading asset: {asset.name} ({asset.size} bytes)")

        response = self._get(
            asset.download_url,
            headers={"Accept": "application/octet-stream"},
            stream=True,
        )
        with response:
            self._check_response(response, asset.download_url)

            downloaded = 0

            try:
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
                            downloaded += len(chunk)
                    f.flush()
                    os.fsync(f.fileno())
            except requests.exceptions.RequestException as e:
                raise SourceUnavailableError(asset.download_url, e)

        logger.debug(f"Downloaded {downloaded} bytes for {asset.name}")
        return downloaded

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self) -> "GitHubClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
