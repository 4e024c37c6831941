"""Configuration module for GitHub Release Monitor.

This module handles run settings and credentials:
- RunConfiguration: Immutable per-run settings
- load_config: JSON and shell-style configuration files
- CredentialManager: Token lookup via keyring
"""
