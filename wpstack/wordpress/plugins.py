from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..step import Step


logger = logging.getLogger(__name__)


class PluginsStep(Step):
    """Install missing required plugins, then activate the whole list.

    The final activation is unconditional so plugins that were installed
    without activation, or deactivated by hand, end up active.
    """

    def run(self) -> Dict[str, Any]:
        plugins = self.settings.plugins
        installed: List[str] = []
        present: List[str] = []
        for slug in plugins:
            if self.wp.plugin_is_installed(slug):
                logger.info("Plugin %s already present", slug)
                present.append(slug)
                continue
            self.wp.plugin_install(slug, activate=True)
            installed.append(slug)
        self.wp.plugin_activate(plugins)
        return {
            "status": "success",
            "installed": installed,
            "present": present,
            "activated": list(plugins),
            "message": f"Plugins active: {', '.join(plugins)}",
        }

    def describe(self) -> str:
        return "Required plugins"
