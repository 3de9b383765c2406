from __future__ import annotations

from typing import Any, Dict

from ..step import Step
from .filesystem import fix_permissions


class ThemeDeployStep(Step):
    """Replace the deployed theme with the local source tree.

    The previous copy is removed (a missing copy is fine), the directory is
    recreated, the source contents are copied in, and ownership and modes
    are reset.
    """

    def run(self) -> Dict[str, Any]:
        s = self.settings
        runner = self.context.runner
        target = s.theme_target
        runner.run(s.app_service, "rm", ["-rf", target], check=False)
        runner.run(s.app_service, "mkdir", ["-p", target])
        runner.copy_into(s.theme_source, s.app_service, target)
        fix_permissions(runner, s.app_service, target, s.web_owner, s.dir_mode, s.file_mode)
        return {"status": "success", "source": str(s.theme_source), "target": target}

    def describe(self) -> str:
        return f"Deploying theme {self.settings.theme_slug}"


class ThemeActivateStep(Step):
    def run(self) -> Dict[str, Any]:
        slug = self.settings.theme_slug
        self.wp.theme_activate(slug)
        return {"status": "success", "message": f"Theme {slug} active"}

    def describe(self) -> str:
        return f"Activating theme {self.settings.theme_slug}"
