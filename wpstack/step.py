from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from .process import ComposeRunner
from .settings import SiteCredentials, StackSettings

if TYPE_CHECKING:
    from .hook import Hook
    from .wordpress.cli import WpCli


@dataclass
class StepContext:
    """Everything a step may use, passed explicitly (no ambient lookups)."""

    runner: ComposeRunner
    wp: "WpCli"
    settings: StackSettings
    credentials: SiteCredentials


class Step(ABC):
    """A granular, idempotent unit of provisioning work.

    ``is_done()`` is the precondition: when it returns True the Runner skips
    ``run()``. Steps marked ``best_effort`` may fail without aborting the
    sequence. ``run()`` returns a JSON-serializable dict.
    """

    def __init__(self, id: str, context: StepContext, best_effort: bool = False, hook: Optional["Hook"] = None) -> None:
        self.id = id
        self.context = context
        self.best_effort = best_effort
        self.hook = hook

    @property
    def wp(self) -> "WpCli":
        return self.context.wp

    @property
    def settings(self) -> StackSettings:
        return self.context.settings

    def is_done(self) -> bool:
        """Return True when the step's effect is already in place."""
        return False

    @abstractmethod
    def run(self) -> Dict[str, Any]:
        """Execute the step and return structured output."""

    def describe(self) -> str:
        """Short human description used in progress output."""
        return self.id
