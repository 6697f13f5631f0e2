"""
Tag-based scenario gating.

Hooks ask ``skip_reason`` before any browser work happens.  A scenario is
skipped (cooperatively, never as an error) when it carries:

- ``@skip`` or ``@wip`` -- always
- ``@<env>-only`` -- when the active environment is not ``<env>``
  (``@dev-only``, ``@qa-only``, ``@prod-only``, ...)
"""

from __future__ import annotations

import re
from collections.abc import Iterable

ALWAYS_SKIP = ("skip", "wip")
SUITE_MARKERS = ("smoke", "regression")

_ENV_ONLY = re.compile(r"^(?P<env>[a-z0-9_]+)-only$")


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Lower-case tags and drop any leading ``@``."""
    return [tag.strip().lstrip("@").lower() for tag in tags if tag and tag.strip()]


def required_environments(tags: Iterable[str]) -> set[str]:
    """Environments named by ``@<env>-only`` tags."""
    envs = set()
    for tag in normalize_tags(tags):
        match = _ENV_ONLY.match(tag)
        if match:
            envs.add(match.group("env"))
    return envs


def skip_reason(tags: Iterable[str], environment: str) -> str | None:
    """
    Decide whether a scenario must be skipped.

    Args:
        tags: Effective scenario tags, with or without ``@``.
        environment: Active environment name.

    Returns:
        A human-readable reason, or ``None`` when the scenario should run.
    """
    normalized = normalize_tags(tags)
    for tag in ALWAYS_SKIP:
        if tag in normalized:
            return f"Scenario marked with @{tag}"

    environment = environment.strip().lower()
    allowed = required_environments(normalized)
    if allowed and environment not in allowed:
        only = ", ".join(f"@{env}-only" for env in sorted(allowed))
        return f"Skipping {only} scenario in '{environment}' environment"
    return None


def suite_markers(tags: Iterable[str]) -> list[str]:
    """Which of ``smoke``/``regression`` a scenario is tagged with."""
    normalized = normalize_tags(tags)
    return [marker for marker in SUITE_MARKERS if marker in normalized]
