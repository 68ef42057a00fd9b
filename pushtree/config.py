"""
config.py

Responsibility: Load the optional YAML config file into a typed, frozen model.

Every key is optional; defaults reproduce the stock behaviour (public repo,
timestamped name, the built-in ignore list). CLI flags are applied on top with
`with_overrides` so the publisher only ever sees one `PublishConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from pushtree.ignore import DEFAULT_IGNORE_PATTERNS, IgnorePatternError, IgnoreRule, compile_rules

DEFAULT_NAME_TEMPLATE = "{{ prefix }}-{{ timestamp }}"
DEFAULT_COMMIT_MESSAGE = "Upload {{ repo_name }} ({{ file_count }} files)"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class RefPollConfig:
    """Bounded wait for a freshly created repo's default branch to appear."""

    attempts: int = 6
    backoff: float = 0.5


@dataclass(frozen=True)
class PublishConfig:
    repo_name: str | None = None
    name_prefix: str | None = None
    name_template: str = DEFAULT_NAME_TEMPLATE
    description: str = ""
    private: bool = False
    commit_message: str = DEFAULT_COMMIT_MESSAGE
    ignore: tuple[str, ...] = DEFAULT_IGNORE_PATTERNS
    concurrency: int = 8
    ref_poll: RefPollConfig = field(default_factory=RefPollConfig)
    api_base: str = "https://api.github.com"

    def ignore_rules(self) -> list[IgnoreRule]:
        try:
            return compile_rules(self.ignore)
        except IgnorePatternError as e:
            raise ConfigError(str(e)) from e

    def with_overrides(self, **overrides: Any) -> PublishConfig:
        """Return a copy with every non-None override applied, then validate it."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        extra = changes.pop("extra_ignore", None)
        if extra:
            changes["ignore"] = tuple(changes.get("ignore", self.ignore)) + tuple(extra)
        updated = replace(self, **changes)
        _validate(updated)
        return updated


def _as_patterns(value: Any, key: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"`{key}` must be a list of strings when provided.")
    return tuple(value)


def _as_int(value: Any, key: str) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"`{key}` must be an integer.")
    return value


def _validate(cfg: PublishConfig) -> None:
    if cfg.concurrency < 1:
        raise ConfigError("`concurrency` must be at least 1.")
    if cfg.ref_poll.attempts < 1:
        raise ConfigError("`ref_poll.attempts` must be at least 1.")
    if cfg.ref_poll.backoff < 0:
        raise ConfigError("`ref_poll.backoff` must not be negative.")
    cfg.ignore_rules()


def parse_config(data: dict[str, Any]) -> PublishConfig:
    """Build a `PublishConfig` from an already-decoded mapping."""
    kwargs: dict[str, Any] = {}

    for key in ("repo_name", "name_prefix", "name_template", "description", "commit_message", "api_base"):
        if data.get(key) is not None:
            kwargs[key] = str(data[key]).strip()

    if "private" in data:
        kwargs["private"] = bool(data["private"])

    ignore = DEFAULT_IGNORE_PATTERNS
    if data.get("ignore") is not None:
        ignore = _as_patterns(data["ignore"], "ignore")
    if data.get("extra_ignore") is not None:
        ignore = ignore + _as_patterns(data["extra_ignore"], "extra_ignore")
    kwargs["ignore"] = ignore

    if data.get("concurrency") is not None:
        kwargs["concurrency"] = _as_int(data["concurrency"], "concurrency")

    poll_raw = data.get("ref_poll") or {}
    if not isinstance(poll_raw, dict):
        raise ConfigError("`ref_poll` must be an object/mapping when provided.")
    poll = RefPollConfig()
    if poll_raw.get("attempts") is not None:
        poll = replace(poll, attempts=_as_int(poll_raw["attempts"], "ref_poll.attempts"))
    if poll_raw.get("backoff") is not None:
        try:
            poll = replace(poll, backoff=float(poll_raw["backoff"]))
        except (TypeError, ValueError) as e:
            raise ConfigError("`ref_poll.backoff` must be a number.") from e
    kwargs["ref_poll"] = poll

    cfg = PublishConfig(**kwargs)
    _validate(cfg)
    return cfg


def load_config(config_path: str | Path | None) -> PublishConfig:
    """
    Load a YAML config file, or return defaults when no path is given.

    Recognised keys:
    - repo_name, name_prefix, name_template, description, commit_message: str
    - private: bool
    - ignore / extra_ignore: list[str]
    - concurrency: int
    - ref_poll.attempts: int, ref_poll.backoff: float
    - api_base: str
    """
    if config_path is None:
        return PublishConfig()
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file does not exist: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config file must be a mapping/object at the top level.")
    return parse_config(data)
