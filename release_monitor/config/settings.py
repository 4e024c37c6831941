"""Run configuration for GitHub Release Monitor.

Provides the immutable RunConfiguration and loaders for JSON and
shell-style (KEY="value") configuration files.
"""

import json
import os
import re
import shlex
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from release_monitor.config.credentials import CredentialManager
from release_monitor.exceptions import ConfigInvalidError
from release_monitor.updater.github_client import GITHUB_API_BASE, REQUEST_TIMEOUT
from release_monitor.utils import validators

DEFAULT_ASSET_PATTERN = ".*"
DEFAULT_KEEP_COUNT = 3
TOKEN_ENV_VAR = "GITHUB_TOKEN"

# Shell-style keys written by the provisioning scripts
SHELL_KEYS = {
    "GITHUB_OWNER": "owner",
    "GITHUB_REPO": "repo",
    "GITHUB_TOKEN": "token",
    "MINOR_VERSION_PREFIX": "version_prefix",
    "DOWNLOAD_DIR": "download_dir",
    "STATE_FILE": "state_file",
    "ASSET_PATTERN": "asset_pattern",
    "KEEP_COUNT": "keep_count",
    "LOG_FILE": "log_file",
    "VERBOSE": "verbose",
    "GITHUB_API_URL": "api_url",
    "REQUEST_TIMEOUT": "timeout",
}

_ASSIGNMENT_PATTERN = re.compile(r'^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$')
_TRUE_VALUES = {"1", "true", "yes", "on"}


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _to_int(value: Any) -> Any:
    """Convert to int, leaving unparsable values for validate() to report."""
    if isinstance(value, bool):
        return value
    try:
        return int(value)
    except (ValueError, TypeError):
        return value


def _to_path(value: Any) -> Optional[Path]:
    if value is None or str(value).strip() == "":
        return None
    return Path(os.path.expanduser(str(value)))


@dataclass(frozen=True)
class RunConfiguration:
    """Settings for a single monitoring run."""

    # Repository
    owner: str = ""
    repo: str = ""
    token: Optional[str] = None
    api_url: str = GITHUB_API_BASE
    timeout: int = REQUEST_TIMEOUT

    # Release selection
    version_prefix: str = ""
    asset_pattern: str = DEFAULT_ASSET_PATTERN

    # Storage
    download_dir: Optional[Path] = None
    state_file: Optional[Path] = None
    keep_count: int = DEFAULT_KEEP_COUNT

    # Logging
    log_file: Optional[Path] = None
    verbose: bool = False

    @property
    def repository(self) -> str:
        """Repository identity as owner/repo."""
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunConfiguration":
        """Create a configuration from a dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {k: v for k, v in data.items() if k in valid_fields}

        for key in ("owner", "repo", "version_prefix", "api_url"):
            if key in values and values[key] is not None:
                values[key] = str(values[key]).strip()
        if values.get("asset_pattern") in (None, ""):
            values.pop("asset_pattern", None)
        if values.get("token") is not None:
            values["token"] = str(values["token"]).strip() or None
        for key in ("download_dir", "state_file", "log_file"):
            if key in values:
                values[key] = _to_path(values[key])
        for key in ("keep_count", "timeout"):
            if values.get(key) in (None, ""):
                values.pop(key, None)
            elif key in values:
                values[key] = _to_int(values[key])
        if "verbose" in values:
            values["verbose"] = _to_bool(values["verbose"])

        return cls(**values)

    def with_overrides(self, **changes: Any) -> "RunConfiguration":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def validate(self) -> List[str]:
        """
        Check every field.

        Returns:
            One message per problem; empty if the configuration is usable
        """
        checks = [
            validators.validate_owner(self.owner),
            validators.validate_repo(self.repo),
            validators.validate_token(self.token),
            validators.validate_version_prefix(self.version_prefix),
            validators.validate_directory_path(self.download_dir, "DOWNLOAD_DIR"),
            validators.validate_file_path(self.state_file, "STATE_FILE"),
            validators.validate_asset_pattern(self.asset_pattern),
            validators.validate_keep_count(self.keep_count),
            validators.validate_timeout(self.timeout),
        ]
        if self.log_file is not None:
            checks.append(validators.validate_file_path(self.log_file, "LOG_FILE"))

        return [error for is_valid, error in checks if not is_valid]

    def describe(self) -> str:
        """One-line summary for logs; never includes the token."""
        return (
            f"repository={self.repository} prefix={self.version_prefix} "
            f"pattern={self.asset_pattern} download_dir={self.download_dir} "
            f"state_file={self.state_file} keep_count={self.keep_count}"
        )


def parse_shell_config(text: str) -> Dict[str, str]:
    """
    Parse a shell-style configuration file.

    Accepts lines of the form KEY="value" (optionally prefixed with
    "export"); blank lines and comments are ignored. Values are unquoted
    with shlex. Nothing is executed.

    Args:
        text: File contents

    Returns:
        Mapping of the raw keys to their values

    Raises:
        ValueError: If a line is not an assignment or has unbalanced quotes
    """
    values: Dict[str, str] = {}
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        match = _ASSIGNMENT_PATTERN.match(line)
        if not match:
            raise ValueError(f"line {line_number}: expected KEY=value")

        key, raw_value = match.groups()
        try:
            parts = shlex.split(raw_value, comments=True)
        except ValueError as e:
            raise ValueError(f"line {line_number}: {e}")
        values[key] = " ".join(parts)

    return values


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    """Read a JSON or shell-style file into RunConfiguration field names."""
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigInvalidError([f"Configuration file not found: {config_path}"])
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigInvalidError([f"Cannot read configuration file: {config_path}"], e)

    if config_path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigInvalidError([f"Invalid JSON in {config_path}"], e)
        if not isinstance(data, dict):
            raise ConfigInvalidError([f"Expected a JSON object in {config_path}"])
        return data

    try:
        raw = parse_shell_config(text)
    except ValueError as e:
        raise ConfigInvalidError([f"Invalid configuration file {config_path}"], e)
    return {SHELL_KEYS[k]: v for k, v in raw.items() if k in SHELL_KEYS}


def load_config(
    config_path: Union[str, Path],
    environ: Optional[Mapping[str, str]] = None,
    credentials: Optional[CredentialManager] = None,
) -> RunConfiguration:
    """
    Load a run configuration from disk.

    When the file carries no token, the GITHUB_TOKEN environment variable
    is used, then the system keyring.

    Args:
        config_path: JSON (*.json) or shell-style configuration file
        environ: Environment to read the token from (default: os.environ)
        credentials: Keyring lookup (default: CredentialManager())

    Returns:
        RunConfiguration, not yet validated

    Raises:
        ConfigInvalidError: If the file is missing or unparsable
    """
    environ = os.environ if environ is None else environ
    config = RunConfiguration.from_dict(_read_config_file(Path(config_path)))

    if not config.token:
        token = environ.get(TOKEN_ENV_VAR, "").strip() or None
        if token is None and config.owner and config.repo:
            token = (credentials or CredentialManager()).get_token(config.owner, config.repo)
        if token:
            config = config.with_overrides(token=token)

    return config
