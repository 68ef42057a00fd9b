"""
templating.py

Responsibility: Render the short text templates used for the repository name
and the commit message.

Templates use Jinja2 with StrictUndefined so a typo in a config value fails
loudly instead of producing an empty name.
"""

from __future__ import annotations

import time
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from pushtree.config import ConfigError

_env = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=False)


def render_text(template: str, context: dict[str, Any]) -> str:
    try:
        return _env.from_string(template).render(**context).strip()
    except TemplateError as e:
        raise ConfigError(f"Failed rendering template {template!r}: {e}") from e


def repo_name_for(*, repo_name: str | None, name_template: str, prefix: str, now: float | None = None) -> str:
    """
    Pick the repository name: a literal name wins, otherwise render the template.

    `timestamp` is unix time in milliseconds, so repeated runs get distinct names.
    """
    if repo_name:
        return repo_name
    millis = int((time.time() if now is None else now) * 1000)
    name = render_text(name_template, {"prefix": prefix, "timestamp": millis})
    if not name:
        raise ConfigError("Repository name template rendered to an empty string.")
    return name
