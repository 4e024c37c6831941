"""Utility module for GitHub Release Monitor.

This module provides cross-cutting utilities:
- Logging: Configured logging with secret redaction
- Validators: Input validation for configuration values
"""
