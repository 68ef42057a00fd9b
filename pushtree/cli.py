"""
cli.py

Responsibility: CLI entrypoint for pushtree.

High-level flow (single command `publish`):
1) Load config (YAML file + CLI overrides)
2) Collect text files from the source directory
3) Create a GitHub repo and push the files as one commit
4) Report the repository URL and commit SHA

This module orchestrates behavior but keeps concerns isolated:
- Config: `config.py`
- File collection: `collector.py`
- GitHub API: `github_client.py`
- Upload sequence: `publisher.py`
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from pushtree.collector import CollectError, collect_files
from pushtree.config import ConfigError, PublishConfig, load_config
from pushtree.github_client import GitHubClient
from pushtree.log import build_logger
from pushtree.publisher import Publisher, RepoRequest
from pushtree.results import Err
from pushtree.templating import repo_name_for


def _report_error(logger: logging.Logger, err: Err) -> int:
    logger.error("Error: %s", err.message)
    if err.body is not None:
        logger.error("Response: %s", err.body)
    return 1


def _resolve_config(args: argparse.Namespace) -> PublishConfig:
    cfg = load_config(args.config)
    return cfg.with_overrides(
        repo_name=args.repo_name,
        description=args.description,
        private=args.private,
        commit_message=args.message,
        concurrency=args.concurrency,
        api_base=args.api_base,
        extra_ignore=args.ignore,
    )


def publish_cmd(args: argparse.Namespace, logger: logging.Logger) -> int:
    source = Path(args.source).resolve()
    cfg = _resolve_config(args)

    logger.info("Reading project files from %s", source)
    files = collect_files(source, cfg.ignore_rules(), logger)
    logger.info("Found %d files to upload", len(files))

    if args.dry_run:
        for record in files:
            print(record.path)
        return 0

    repo_name = repo_name_for(
        repo_name=cfg.repo_name,
        name_template=cfg.name_template,
        prefix=cfg.name_prefix or source.name,
    )

    token = args.github_token or os.environ.get("GITHUB_TOKEN") or ""
    client = GitHubClient(token, api_base=cfg.api_base)
    publisher = Publisher(
        client,
        logger,
        concurrency=cfg.concurrency,
        ref_attempts=cfg.ref_poll.attempts,
        ref_backoff=cfg.ref_poll.backoff,
    )

    request = RepoRequest(
        name=repo_name,
        description=cfg.description,
        private=cfg.private,
        commit_message=cfg.commit_message,
    )
    outcome = publisher.publish(files, request)
    if isinstance(outcome, Err):
        return _report_error(logger, outcome)

    published = outcome.value
    logger.info("Successfully pushed to GitHub")
    logger.info("Repository URL: %s", published.repo.html_url)
    logger.info("Commit SHA: %s", published.commit_sha)

    if args.verify:
        checked = publisher.verify(published, files)
        if isinstance(checked, Err):
            return _report_error(logger, checked)

    return 0


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return n


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pushtree", description="Push a local directory to a new GitHub repository")
    p.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    sub = p.add_subparsers(dest="command", required=True)

    b = sub.add_parser("publish", help="Create a repo and push the directory's text files as one commit")
    b.add_argument("source", nargs="?", default=".", help="Directory to publish (default: current directory)")
    b.add_argument("--config", default=None, help="Path to a YAML config file")
    b.add_argument("--repo-name", default=None, help="Repository name (default: <dir>-<timestamp>)")
    b.add_argument("--description", default=None, help="Repository description")
    b.add_argument("--message", default=None, help="Commit message (Jinja2 template)")
    b.add_argument("--private", dest="private", action="store_true", default=None, help="Create a private repo")
    b.add_argument("--public", dest="private", action="store_false", default=None, help="Create a public repo")
    b.add_argument("--concurrency", type=_positive_int, default=None, help="Parallel blob uploads (default: 8)")
    b.add_argument(
        "--ignore",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Extra ignore pattern (substring, or one '*' wildcard); repeatable",
    )
    b.add_argument("--github-token", default=None, help="GitHub token (or set env GITHUB_TOKEN)")
    b.add_argument("--api-base", default=None, help="GitHub API base URL")
    b.add_argument("--dry-run", action="store_true", help="List the files that would be published and exit")
    b.add_argument("--verify", action="store_true", help="Read the published tree back and compare contents")

    b.set_defaults(func=publish_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logger = build_logger(args.log_level)
    try:
        return int(args.func(args, logger))
    except (ConfigError, CollectError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
