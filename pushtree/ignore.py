"""
ignore.py

Responsibility: Decide whether a relative path is excluded from collection.

Two rule shapes are supported:
- a plain string, matched as a substring anywhere in the path
- a pattern with a single `*`, where `*` matches any character sequence

Matching is case-sensitive and unanchored. There is no negation and no
per-directory precedence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable


class IgnorePatternError(ValueError):
    pass


DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    "node_modules",
    ".git",
    "dist",
    "build",
    "*.log",
    ".DS_Store",
    "project-backup.tar.gz",
)

WILDCARD = "*"


@dataclass(frozen=True)
class IgnoreRule:
    pattern: str
    regex: re.Pattern[str] | None = None

    def matches(self, path: str) -> bool:
        if self.regex is not None:
            return self.regex.search(path) is not None
        return self.pattern in path


def compile_rule(pattern: str) -> IgnoreRule:
    if not pattern:
        raise IgnorePatternError("Ignore patterns must be non-empty strings.")
    count = pattern.count(WILDCARD)
    if count == 0:
        return IgnoreRule(pattern=pattern)
    if count > 1:
        raise IgnorePatternError(f"Ignore pattern {pattern!r} has more than one '*', which is not supported.")
    head, tail = pattern.split(WILDCARD)
    return IgnoreRule(pattern=pattern, regex=re.compile(re.escape(head) + ".*" + re.escape(tail)))


def compile_rules(patterns: Iterable[str]) -> list[IgnoreRule]:
    return [compile_rule(p) for p in patterns]


def should_ignore(path: str, rules: Iterable[IgnoreRule]) -> bool:
    return any(rule.matches(path) for rule in rules)
