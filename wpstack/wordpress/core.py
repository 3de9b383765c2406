from __future__ import annotations

from typing import Any, Dict

from ..step import Step
from .filesystem import fix_permissions


class WpContentPermissionsStep(Step):
    """Make wp-content writable by the web server.

    Creates ``uploads`` and ``upgrade`` and applies the configured owner and
    directory/file modes recursively in the application service.
    """

    def run(self) -> Dict[str, Any]:
        s = self.settings
        runner = self.context.runner
        runner.run(s.app_service, "mkdir", ["-p", f"{s.wp_content}/uploads", f"{s.wp_content}/upgrade"])
        fix_permissions(runner, s.app_service, s.wp_content, s.web_owner, s.dir_mode, s.file_mode)
        return {"status": "success", "path": s.wp_content}

    def describe(self) -> str:
        return "Applying filesystem permissions"


class CoreInstallStep(Step):
    """Install WordPress core unless ``wp core is-installed`` already succeeds."""

    def is_done(self) -> bool:
        return self.wp.core_is_installed()

    def run(self) -> Dict[str, Any]:
        c = self.context.credentials
        self.wp.core_install(
            url=c.site_url,
            title=c.site_title,
            admin_user=c.admin_user,
            admin_password=c.admin_pass,
            admin_email=c.admin_email,
        )
        return {"status": "success", "message": f"Installed WordPress core at {c.site_url}"}

    def describe(self) -> str:
        return "WordPress core"
