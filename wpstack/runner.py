from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .errors import StepExecutionError
from .hook import Hook
from .step import Step


logger = logging.getLogger(__name__)


class Runner:
    """Sequential runner for a list of steps.

    Steps run strictly in declared order. A step whose ``is_done()`` is True
    is recorded as skipped. A failing step aborts the rest by re-raising its
    StepExecutionError, unless the step is ``best_effort``, in which case
    the failure is recorded and logged and the next step runs.
    """

    def __init__(self, id: str, steps: List[Step], hook: Optional[Hook] = None) -> None:
        self.id = id
        self.steps = steps
        self.hook = hook
        self.results: Dict[str, Dict[str, Any]] = {}

    def _notify(self, method: str, *args: Any) -> None:
        if self.hook is None:
            return
        try:
            getattr(self.hook, method)(*args)
        except Exception:  # noqa: BLE001
            logger.debug("hook %s failed", method, exc_info=True)

    def execute(self) -> Dict[str, Dict[str, Any]]:
        self.results = {}
        for step in self.steps:
            step.hook = step.hook or self.hook
            self._notify("on_step_start", step)
            try:
                if step.is_done():
                    res: Dict[str, Any] = {"status": "skipped", "reason": "already done"}
                else:
                    res = step.run()
            except StepExecutionError as e:
                err = e if e.step else e.for_step(step.id)
                res = {"status": "error", "error": str(err), "best_effort": step.best_effort}
                self.results[step.id] = res
                if not step.best_effort:
                    raise err from e
                logger.warning("best-effort step %s failed; continuing: %s", step.id, err)
                self._notify("on_step_end", step, dict(res, message=f"{step.describe()}: ignored failure"))
                continue
            self.results[step.id] = res
            self._notify("on_step_end", step, res)
        return self.results
