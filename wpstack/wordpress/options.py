from __future__ import annotations

from importlib import resources
from typing import Any, Dict, Optional

from ..errors import MissingDependencyError
from ..settings import OptionSetting
from ..step import Step, StepContext
from .posts import upsert_post


CUSTOM_CSS_POST_TYPE = "custom_css"


def default_css() -> str:
    return resources.files("wpstack.assets").joinpath("custom.css").read_text(encoding="utf-8")


class ThemeOptionsStep(Step):
    """Presentation options of the base theme plus theme mods."""

    def run(self) -> Dict[str, Any]:
        s = self.settings
        option = f"{s.base_theme}_theme_options"
        self.wp.option_update(option, s.theme_options, fmt="json")
        for key, value in s.theme_mods.items():
            self.wp.theme_mod_set(key, value)
        return {"status": "success", "option": option, "mods": dict(s.theme_mods)}

    def describe(self) -> str:
        return "Applying brand color system"


class CustomCssStep(Step):
    """Upsert the theme's Additional CSS post and link it into theme mods."""

    def __init__(self, id: str, context: StepContext, css: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(id, context, **kwargs)
        self._css = css

    def css(self) -> str:
        if self._css is not None:
            return self._css
        path = self.settings.custom_css_file
        if path is None:
            return default_css()
        if not path.is_file():
            raise MissingDependencyError(f"Missing custom CSS file: {path}", [str(path)])
        return path.read_text(encoding="utf-8")

    def run(self) -> Dict[str, Any]:
        s = self.settings
        post_id, created = upsert_post(
            self.wp,
            CUSTOM_CSS_POST_TYPE,
            s.theme_slug,
            self.css(),
            title=f"Additional CSS ({s.theme_title})",
        )
        self.wp.set_theme_mod_option(s.theme_slug, "custom_css_post_id", post_id)
        return {"status": "success", "post_id": post_id, "created": created}

    def describe(self) -> str:
        return "Custom CSS"


class OptionStep(Step):
    """A single site option; best-effort when the setting says so."""

    def __init__(self, context: StepContext, setting: OptionSetting) -> None:
        super().__init__(f"option:{setting.name}", context, best_effort=setting.best_effort)
        self.setting = setting

    def run(self) -> Dict[str, Any]:
        self.wp.option_update(self.setting.name, self.setting.value, fmt=self.setting.fmt)
        return {"status": "success", "option": self.setting.name, "value": self.setting.value}

    def describe(self) -> str:
        return f"option {self.setting.name}={self.setting.value}"
