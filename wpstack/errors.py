from __future__ import annotations

import re
from typing import List, Optional, Sequence


_SECRET_ARG_RE = re.compile(r"^(--admin_password=|--dbpass=|-p)(.+)$")


def redact_argv(argv: Sequence[str]) -> List[str]:
    """Mask password arguments for display."""
    return [_SECRET_ARG_RE.sub(r"\1***", str(a)) for a in argv]


class WpstackError(Exception):
    """Base class for provisioning failures surfaced to the operator."""


class MissingDependencyError(WpstackError):
    """A required tool, template or source directory is absent."""

    def __init__(self, message: str, missing: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.missing: List[str] = list(missing or [])


class ConfigError(WpstackError):
    """The credential store or project configuration cannot be used."""


class ReadinessTimeoutError(WpstackError):
    """A dependency never answered its readiness probe."""

    def __init__(self, attempts: int, target: str = "dependency") -> None:
        super().__init__(f"{target} did not become ready after {attempts} attempts")
        self.attempts = attempts
        self.target = target


class StepExecutionError(WpstackError):
    """An external command exited non-zero.

    Carries the command line and the tool's own output so the operator sees
    the real diagnostic.
    """

    def __init__(
        self,
        argv: Sequence[str],
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
        step: Optional[str] = None,
    ) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.step = step
        super().__init__(self._describe())

    def _describe(self) -> str:
        where = f"step '{self.step}': " if self.step else ""
        msg = f"{where}command failed with exit code {self.returncode}: {' '.join(redact_argv(self.argv))}"
        detail = (self.stderr or self.stdout or "").strip()
        if detail:
            msg += f"\n{detail}"
        return msg

    def for_step(self, step: str) -> "StepExecutionError":
        """Return a copy attributed to the named step."""
        return StepExecutionError(self.argv, self.returncode, self.stdout, self.stderr, step=step)
