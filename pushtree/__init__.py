"""
pushtree package

This package pushes a local directory to a brand-new GitHub repository as a
single commit, using the Git Data API rather than a local git checkout.

Key responsibilities are split across modules:
- `ignore.py`: substring / single-wildcard ignore rules
- `collector.py`: walk a directory and read its UTF-8 files
- `github_client.py`: isolated GitHub REST API interactions, returning results
- `publisher.py`: repo creation -> blobs -> tree -> commit -> ref update
- `config.py`: YAML config file and CLI overrides
- `cli.py`: CLI entrypoint and exit codes
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
