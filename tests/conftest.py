"""Pytest configuration and shared fixtures for GitHub Release Monitor tests."""

import pytest
from pathlib import Path
from typing import Callable, Iterable, List

from release_monitor.config.settings import RunConfiguration


# Test constants
TEST_OWNER = "acme"
TEST_REPO = "widget"
TEST_TOKEN = "test-token-123"
TEST_PREFIX = "v1"


def make_release_payload(
    tag: str,
    asset_names: Iterable[str] = (),
    base_url: str = "https://api.github.com",
    draft: bool = False,
) -> dict:
    """Build a release record shaped like the GitHub releases API."""
    return {
        "tag_name": tag,
        "name": f"Release {tag}",
        "published_at": "2024-01-15T10:30:00Z",
        "html_url": f"https://github.com/{TEST_OWNER}/{TEST_REPO}/releases/tag/{tag}",
        "prerelease": False,
        "draft": draft,
        "assets": [
            {
                "name": name,
                "url": f"{base_url}/repos/{TEST_OWNER}/{TEST_REPO}/releases/assets/{tag}/{name}",
                "browser_download_url": (
                    f"https://github.com/{TEST_OWNER}/{TEST_REPO}/releases/download/{tag}/{name}"
                ),
                "size": 1024,
                "content_type": "application/octet-stream",
            }
            for name in asset_names
        ],
    }


@pytest.fixture
def download_dir(tmp_path: Path) -> Path:
    """Return the download root used by test configurations."""
    return tmp_path / "releases"


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    """Return the state file path used by test configurations."""
    return tmp_path / "state" / "last_version"


@pytest.fixture
def make_config(download_dir: Path, state_file: Path) -> Callable[..., RunConfiguration]:
    """Provide a factory for valid configurations with overridable fields."""

    def factory(**overrides) -> RunConfiguration:
        values = {
            "owner": TEST_OWNER,
            "repo": TEST_REPO,
            "token": TEST_TOKEN,
            "version_prefix": TEST_PREFIX,
            "download_dir": download_dir,
            "state_file": state_file,
        }
        values.update(overrides)
        return RunConfiguration(**values)

    return factory


@pytest.fixture
def make_version_dirs(download_dir: Path) -> Callable[..., List[Path]]:
    """Provide a factory that creates version directories with one file each."""

    def factory(*tags: str) -> List[Path]:
        created = []
        for tag in tags:
            version_dir = download_dir / tag
            version_dir.mkdir(parents=True, exist_ok=True)
            (version_dir / "app.tar.gz").write_bytes(b"content of " + tag.encode())
            created.append(version_dir)
        return created

    return factory


@pytest.fixture
def release_payload() -> Callable[..., dict]:
    """Provide the release record builder."""
    return make_release_payload
