"""Input validators for GitHub Release Monitor.

Provides validation functions for configuration values like repository
names, version prefixes, and asset patterns.
"""

import re
from pathlib import Path
from typing import Optional, Tuple, Union


# GitHub user/organization name: alphanumerics and single hyphens
OWNER_PATTERN = re.compile(r'^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$')

# GitHub repository name
REPO_PATTERN = re.compile(r'^[A-Za-z0-9._-]{1,100}$')


def validate_owner(owner: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a repository owner name.

    Args:
        owner: User or organization name

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not owner or not owner.strip():
        return False, "GITHUB_OWNER is required"

    if OWNER_PATTERN.match(owner.strip()):
        return True, None

    return False, f"Invalid repository owner: {owner}"


def validate_repo(repo: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a repository name.

    Args:
        repo: Repository name

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not repo or not repo.strip():
        return False, "GITHUB_REPO is required"

    repo = repo.strip()

    if repo in (".", "..") or not REPO_PATTERN.match(repo):
        return False, f"Invalid repository name: {repo}"

    return True, None


def validate_token(token: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate that a credential is present."""
    if not token or not token.strip():
        return False, "GITHUB_TOKEN is required"
    return True, None


def validate_version_prefix(prefix: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a version prefix filter.

    Args:
        prefix: Literal prefix of eligible tags (e.g., "v1.2")

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not prefix or not prefix.strip():
        return False, "MINOR_VERSION_PREFIX is required"

    if "/" in prefix or "\\" in prefix:
        return False, f"Version prefix cannot contain path separators: {prefix}"

    return True, None


def validate_asset_pattern(pattern: str) -> Tuple[bool, Optional[str]]:
    """
    Validate an asset name regular expression.

    Args:
        pattern: Regular expression

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        re.compile(pattern)
    except (re.error, TypeError) as e:
        return False, f"Invalid asset pattern '{pattern}': {e}"

    return True, None


def validate_keep_count(keep_count: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a retention count.

    Args:
        keep_count: Number of version directories to keep

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(keep_count, bool) or not isinstance(keep_count, int):
        try:
            keep_count = int(keep_count)
        except (ValueError, TypeError):
            return False, "KEEP_COUNT must be a number"

    if keep_count < 1:
        return False, f"KEEP_COUNT must be at least 1, got {keep_count}"

    return True, None


def validate_timeout(timeout: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a timeout value in seconds.

    Args:
        timeout: Timeout in seconds

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(timeout, int):
        try:
            timeout = int(timeout)
        except (ValueError, TypeError):
            return False, "Timeout must be a number"

    if timeout < 5 or timeout > 300:
        return False, f"Timeout must be between 5 and 300 seconds, got {timeout}"

    return True, None


def validate_directory_path(
    path: Optional[Union[str, Path]],
    field_name: str
) -> Tuple[bool, Optional[str]]:
    """
    Validate a path that will be used as (or inside) a directory.

    Args:
        path: Path to validate
        field_name: Configuration key, used in the error message

    Returns:
        Tuple of (is_valid, error_message)
    """
    if path is None or not str(path).strip():
        return False, f"{field_name} is required"

    path = Path(path)

    if path.exists() and not path.is_dir():
        return False, f"{field_name} is not a directory: {path}"

    return True, None


def validate_file_path(
    path: Optional[Union[str, Path]],
    field_name: str
) -> Tuple[bool, Optional[str]]:
    """
    Validate a path that will hold a regular file.

    Args:
        path: Path to validate
        field_name: Configuration key, used in the error message

    Returns:
        Tuple of (is_valid, error_message)
    """
    if path is None or not str(path).strip():
        return False, f"{field_name} is required"

    path = Path(path)

    if path.is_dir():
        return False, f"{field_name} is a directory: {path}"

    return True, None
