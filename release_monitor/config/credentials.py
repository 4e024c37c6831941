"""Credential lookup for GitHub Release Monitor.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) as a fallback store for GitHub tokens, so a token
does not have to be written into the configuration file. Tokens are
stored with the keyring CLI:

    keyring set github-release-monitor <owner>/<repo>
"""

from typing import Optional

import keyring
from keyring.errors import KeyringError


class CredentialManager:
    """Token lookup using the system keyring."""

    SERVICE_NAME = "github-release-monitor"

    def _make_key(self, owner: str, repo: str) -> str:
        """
        Create a unique key for the credential.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Unique key string
        """
        return f"{owner}/{repo}"

    def get_token(self, owner: str, repo: str) -> Optional[str]:
        """
        Retrieve a saved token.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Token string or None if not found or no keyring is available
        """
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(owner, repo))
        except KeyringError:
            return None
