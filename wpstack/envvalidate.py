from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import MissingDependencyError


@dataclass
class EnvIssue:
    kind: str         # 'tool_missing' | 'tool_unusable' | 'path_missing'
    name: str         # tool name or path
    message: str
    details: Optional[Dict[str, Any]] = None


class EnvValidator:
    """Base class for environment validators that collect issues without raising."""

    def run(self) -> List[EnvIssue]:
        raise NotImplementedError


class ToolValidator(EnvValidator):
    """Validate required CLI tools exist and optionally answer a probe command.

    Each item in tools should be a dict with:
      - name: str (executable name)
      - probe_args: List[str] (optional, e.g. ['compose', 'version']); the
        tool must exit 0 when run with them
    """

    def __init__(self, tools: List[Dict[str, Any]]) -> None:
        self.tools = tools

    def run(self) -> List[EnvIssue]:
        issues: List[EnvIssue] = []
        for t in self.tools:
            name = t.get("name")
            if not name:
                continue
            exe = shutil.which(name)
            if not exe:
                issues.append(EnvIssue(kind="tool_missing", name=name, message=f"Missing required command: {name}"))
                continue
            probe = t.get("probe_args")
            if probe:
                try:
                    cp = subprocess.run([exe] + list(probe), capture_output=True, text=True, check=False)
                except OSError as e:
                    issues.append(EnvIssue(kind="tool_unusable", name=name, message=f"Failed to run '{name}': {e}"))
                    continue
                if cp.returncode != 0:
                    issues.append(
                        EnvIssue(
                            kind="tool_unusable",
                            name=name,
                            message=f"'{name} {' '.join(probe)}' exited with {cp.returncode}",
                            details={"stderr": (cp.stderr or "").strip()},
                        )
                    )
        return issues


class PathValidator(EnvValidator):
    """Validate required files and directories exist.

    Each item is ``(path, kind)`` with kind ``'file'`` or ``'dir'``.
    """

    def __init__(self, paths: List[tuple]) -> None:
        self.paths = paths

    def run(self) -> List[EnvIssue]:
        issues: List[EnvIssue] = []
        for path, kind in self.paths:
            p = Path(path)
            ok = p.is_dir() if kind == "dir" else p.is_file()
            if not ok:
                label = "directory" if kind == "dir" else "file"
                issues.append(EnvIssue(kind="path_missing", name=str(p), message=f"Missing {label}: {p}"))
        return issues


def validate(validators: List[EnvValidator]) -> List[EnvIssue]:
    """Run every validator and aggregate issues."""
    issues: List[EnvIssue] = []
    for v in validators:
        issues.extend(v.run())
    return issues


def raise_for_issues(issues: List[EnvIssue]) -> None:
    if not issues:
        return
    message = "\n".join(i.message for i in issues)
    raise MissingDependencyError(message, [i.name for i in issues])
