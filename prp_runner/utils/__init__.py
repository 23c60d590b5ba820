"""Shared utilities: logging, retries, subprocesses and GitHub Actions I/O."""
