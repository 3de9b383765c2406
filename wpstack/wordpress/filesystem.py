"""Ownership and permission fixes inside a service container."""

from __future__ import annotations

from typing import List

from ..process import CommandResult, ComposeRunner


def fix_permissions(
    runner: ComposeRunner,
    service: str,
    path: str,
    owner: str,
    dir_mode: str,
    file_mode: str,
) -> List[CommandResult]:
    """chown -R ``path``, then set directory and file modes separately."""
    return [
        runner.run(service, "chown", ["-R", owner, path]),
        runner.run(service, "find", [path, "-type", "d", "-exec", "chmod", dir_mode, "{}", "+"]),
        runner.run(service, "find", [path, "-type", "f", "-exec", "chmod", file_mode, "{}", "+"]),
    ]
