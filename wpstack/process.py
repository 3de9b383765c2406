from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .errors import MissingDependencyError, StepExecutionError, redact_argv


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    argv: List[str]
    returncode: Optional[int]
    stdout: str
    stderr: str
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ComposeRunner:
    """Run commands against services of one docker compose project.

    Every call is synchronous and returns a CommandResult. With ``check=True``
    (the default) a non-zero exit raises StepExecutionError; with
    ``check=False`` the failure is logged and returned to the caller.
    There is no retry here.

    Config:
    - project_dir: directory commands run in (compose resolves .env there)
    - compose_file: optional explicit compose file (``-f``)
    - env_file: optional explicit env file (``--env-file``)
    - timeout: optional per-command timeout in seconds
    - env: variables overlaid on the inherited environment, so values from
      the credential store win over ones exported in the calling shell
    """

    def __init__(
        self,
        project_dir: Path,
        compose_file: Optional[Path] = None,
        env_file: Optional[Path] = None,
        binary: str = "docker",
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.project_dir = Path(project_dir)
        self.compose_file = compose_file
        self.env_file = env_file
        self.binary = binary
        self.timeout = timeout
        self.env: Dict[str, str] = dict(env or {})

    def base_argv(self) -> List[str]:
        argv = [self.binary, "compose"]
        if self.compose_file is not None:
            argv += ["-f", str(self.compose_file)]
        if self.env_file is not None:
            argv += ["--env-file", str(self.env_file)]
        return argv

    def execute(self, args: Sequence[str], check: bool = True, input: Optional[str] = None) -> CommandResult:
        """Run ``docker compose <args>`` and capture its output."""
        argv = self.base_argv() + [str(a) for a in args]
        logger.debug("exec: %s", " ".join(redact_argv(argv)))
        start = time.monotonic()
        try:
            proc = subprocess.run(
                argv,
                cwd=str(self.project_dir),
                input=input,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env={**os.environ, **self.env} if self.env else None,
            )
        except FileNotFoundError as e:
            raise MissingDependencyError(f"Missing required command: {self.binary}", [self.binary]) from e
        except subprocess.TimeoutExpired:
            duration = time.monotonic() - start
            result = CommandResult(argv, None, "", f"timeout after {duration:.1f}s", duration)
            if check:
                raise StepExecutionError(argv, None, "", result.stderr)
            logger.warning("%s timed out after %.1fs", " ".join(redact_argv(argv)), duration)
            return result

        duration = time.monotonic() - start
        result = CommandResult(
            argv=argv,
            returncode=proc.returncode,
            stdout=(proc.stdout or "").replace("\r", "").strip(),
            stderr=(proc.stderr or "").strip(),
            duration=duration,
        )
        if result.ok:
            logger.debug("ok (%.1fs): %s", duration, " ".join(redact_argv(argv)))
            return result
        if check:
            raise StepExecutionError(argv, proc.returncode, result.stdout, result.stderr)
        logger.info("ignored failure exit=%s: %s\n%s", proc.returncode, " ".join(redact_argv(argv)), result.stderr)
        return result

    def run(
        self,
        service: str,
        command: str,
        args: Sequence[str] = (),
        check: bool = True,
        input: Optional[str] = None,
    ) -> CommandResult:
        """Run ``command args...`` inside a running service container."""
        return self.execute(["exec", "-T", service, command, *args], check=check, input=input)

    def up(self, services: Sequence[str]) -> CommandResult:
        """Start services detached; returns once compose accepted the request."""
        return self.execute(["up", "-d", *services])

    def stop(self, service: str, check: bool = True) -> CommandResult:
        return self.execute(["stop", service], check=check)

    def copy_into(self, source_dir: Path, service: str, destination: str) -> CommandResult:
        """Copy the contents of ``source_dir`` into ``destination`` in a service."""
        src = f"{Path(source_dir)}/."
        dest = f"{service}:{destination.rstrip('/')}/"
        return self.execute(["cp", src, dest])
