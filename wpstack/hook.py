from __future__ import annotations

from abc import ABC
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from rich.console import Console
from rich.markup import escape


class Hook(ABC):
    """Base Hook with no-op defaults.

    Hooks observe provisioning: state transitions, step start/end, errors.
    Callers invoke them best-effort, so a failing hook never breaks a run.
    """

    def on_pipeline_start(self, provisioner: Any) -> None:  # noqa: D401
        return None

    def on_state(self, state: Any, message: str) -> None:  # noqa: D401
        return None

    def on_step_start(self, step: Any) -> None:  # noqa: D401
        return None

    def on_step_end(self, step: Any, result: Dict[str, Any]) -> None:  # noqa: D401
        return None

    def on_error(self, scope: str, error: Exception) -> None:  # noqa: D401
        return None

    def on_pipeline_end(self, provisioner: Any, results: Dict[str, Any]) -> None:  # noqa: D401
        return None


class ConsoleHook(Hook):
    """Timestamped progress lines on the terminal."""

    def __init__(self, console: Optional[Console] = None, clock: Callable[[], datetime] = datetime.now, verbose: bool = False) -> None:
        self.console = console or Console()
        self.clock = clock
        self.verbose = verbose

    def _stamp(self) -> str:
        return self.clock().strftime("%H:%M:%S")

    def on_state(self, state: Any, message: str) -> None:
        if message:
            self.console.print(f"[dim]\\[{self._stamp()}][/dim] {escape(message)}")

    def on_step_start(self, step: Any) -> None:
        if self.verbose:
            self.console.print(f"  [dim]- {escape(step.describe())}[/dim]")

    def on_step_end(self, step: Any, result: Dict[str, Any]) -> None:
        if result.get("status") == "skipped":
            self.console.print(f"  [dim]- {escape(step.describe())}: already done[/dim]")
        elif result.get("message"):
            self.console.print(f"  - {escape(str(result['message']))}")
