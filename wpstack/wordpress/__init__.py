from .cli import WpCli
from .core import CoreInstallStep, WpContentPermissionsStep
from .options import CustomCssStep, OptionStep, ThemeOptionsStep
from .plugins import PluginsStep
from .posts import upsert_post
from .theme import ThemeActivateStep, ThemeDeployStep

__all__ = [
    "WpCli",
    "WpContentPermissionsStep",
    "CoreInstallStep",
    "PluginsStep",
    "ThemeDeployStep",
    "ThemeActivateStep",
    "ThemeOptionsStep",
    "CustomCssStep",
    "OptionStep",
    "upsert_post",
]
