"""Typed settings records.

StackSettings is built once from the project Config and SiteCredentials once
from the credential store; both are passed explicitly to every step.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Mapping, Optional

from .config import Config
from .errors import ConfigError
from .readiness import DEFAULT_DELAY, DEFAULT_MAX_ATTEMPTS, RetryPolicy


DEFAULT_PLUGINS = [
    "wordfence",
    "classic-editor",
    "tinymce-advanced",
    "simple-history",
    "disable-comments",
]

DEFAULT_SITE_URL = "http://localhost:8080"
DEFAULT_SITE_TITLE = "Natteravnene Dev"
DEFAULT_ADMIN_EMAIL = "utvikler@natteravnene.no"
DEFAULT_ADMIN_USER = "admin"


@dataclass(frozen=True)
class OptionSetting:
    """One ``wp option update`` call.

    ``best_effort`` options may not exist on every install; their failure is
    logged and provisioning continues.
    """

    name: str
    value: str
    fmt: Optional[str] = None
    best_effort: bool = False

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "OptionSetting":
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(f"preference entry needs a non-empty 'name': {dict(raw)!r}")
        if "value" not in raw:
            raise ConfigError(f"preference '{name}' needs a 'value'")
        return cls(
            name=name.strip(),
            value=str(raw["value"]),
            fmt=raw.get("format"),
            best_effort=bool(raw.get("best_effort", False)),
        )


DEFAULT_PREFERENCES = [
    OptionSetting("default_comment_status", "closed"),
    OptionSetting("default_ping_status", "closed"),
    OptionSetting("comment_moderation", "1"),
    OptionSetting("show_avatars", "0"),
    OptionSetting("classic-editor-replace", "classic", best_effort=True),
    OptionSetting("classic-editor-allow-users", "0", best_effort=True),
]

DEFAULT_THEME_OPTIONS: Dict[str, str] = {
    "color_scheme": "light",
    "link_color": "#7AC3DA",
    "theme_layout": "content-sidebar",
}

DEFAULT_THEME_MODS: Dict[str, str] = {
    "background_color": "f5f7f7",
    "header_textcolor": "222222",
}


def _str(config: Config, key: str, default: str) -> str:
    value = config.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' must be a non-empty string")
    return value.strip()


def _str_list(config: Config, key: str, default: List[str]) -> List[str]:
    value = config.get(key, default)
    if not isinstance(value, list) or not value:
        raise ConfigError(f"'{key}' must be a non-empty list")
    items = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(f"'{key}' entries must be non-empty strings")
        items.append(item.strip())
    return items


def _str_map(config: Config, key: str, default: Dict[str, str]) -> Dict[str, str]:
    value = config.get(key, default)
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return {str(k): str(v) for k, v in value.items()}


def _mode(config: Config, key: str, default: str) -> str:
    value = str(config.get(key, default))
    if not value.isdigit() or any(c not in "01234567" for c in value):
        raise ConfigError(f"'{key}' must be an octal permission mode like 775")
    return value


@dataclass
class StackSettings:
    """Project-level settings, validated before anything is dispatched."""

    project_dir: Path
    env_file: Path
    compose_template: Path
    compose_file: Path
    bind_dirs: List[str]
    db_service: str = "db"
    app_service: str = "wordpress"
    helper_service: str = "wpcli"
    web_root: str = "/var/www/html"
    web_owner: str = "www-data:www-data"
    dir_mode: str = "775"
    file_mode: str = "664"
    theme_slug: str = "nightraven"
    theme_title: str = "Nightraven"
    theme_source: Optional[Path] = None
    base_theme: str = "twentyeleven"
    theme_options: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_THEME_OPTIONS))
    theme_mods: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_THEME_MODS))
    custom_css_file: Optional[Path] = None
    plugins: List[str] = field(default_factory=lambda: list(DEFAULT_PLUGINS))
    preferences: List[OptionSetting] = field(default_factory=lambda: list(DEFAULT_PREFERENCES))
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    site_url: str = DEFAULT_SITE_URL
    site_title: str = DEFAULT_SITE_TITLE
    admin_email: str = DEFAULT_ADMIN_EMAIL
    admin_user: str = DEFAULT_ADMIN_USER

    def __post_init__(self) -> None:
        if self.theme_source is None:
            self.theme_source = self.project_dir / "themes" / self.theme_slug

    @property
    def services(self) -> List[str]:
        return [self.db_service, self.app_service, self.helper_service]

    @property
    def wp_content(self) -> str:
        return str(PurePosixPath(self.web_root) / "wp-content")

    @property
    def theme_target(self) -> str:
        return str(PurePosixPath(self.wp_content) / "themes" / self.theme_slug)

    @classmethod
    def from_config(cls, config: Config, project_dir: Optional[Path] = None) -> "StackSettings":
        base = Path(project_dir) if project_dir else config.project_dir

        def path(key: str, default: str) -> Path:
            p = Path(_str(config, key, default))
            return p if p.is_absolute() else base / p

        try:
            retry = RetryPolicy(
                max_attempts=int(config.get("readiness.max_attempts", DEFAULT_MAX_ATTEMPTS)),
                delay=float(config.get("readiness.delay", DEFAULT_DELAY)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid readiness settings: {e}") from e

        raw_prefs = config.get("preferences")
        if raw_prefs is None:
            preferences = list(DEFAULT_PREFERENCES)
        elif isinstance(raw_prefs, list):
            preferences = []
            for raw in raw_prefs:
                if not isinstance(raw, dict):
                    raise ConfigError("'preferences' entries must be mappings")
                preferences.append(OptionSetting.from_mapping(raw))
        else:
            raise ConfigError("'preferences' must be a list")

        slug = _str(config, "theme.slug", "nightraven")
        css = config.get("custom_css_file")
        settings = cls(
            project_dir=base,
            env_file=path("env_file", ".env"),
            compose_template=path("compose_template", "docker-compose.yml.template"),
            compose_file=path("compose_file", "docker-compose.yml"),
            bind_dirs=_str_list(config, "bind_dirs", ["db", "wordpress"]),
            db_service=_str(config, "services.db", "db"),
            app_service=_str(config, "services.app", "wordpress"),
            helper_service=_str(config, "services.helper", "wpcli"),
            web_root=_str(config, "web_root", "/var/www/html"),
            web_owner=_str(config, "web_owner", "www-data:www-data"),
            dir_mode=_mode(config, "dir_mode", "775"),
            file_mode=_mode(config, "file_mode", "664"),
            theme_slug=slug,
            theme_title=_str(config, "theme.title", slug.capitalize()),
            theme_source=path("theme.source_dir", f"themes/{slug}"),
            base_theme=_str(config, "theme.base", "twentyeleven"),
            theme_options=_str_map(config, "theme.options", DEFAULT_THEME_OPTIONS),
            theme_mods=_str_map(config, "theme.mods", DEFAULT_THEME_MODS),
            custom_css_file=path("custom_css_file", css) if css else None,
            plugins=_str_list(config, "plugins", DEFAULT_PLUGINS),
            preferences=preferences,
            retry=retry,
            site_url=_str(config, "site.url", DEFAULT_SITE_URL),
            site_title=_str(config, "site.title", DEFAULT_SITE_TITLE),
            admin_email=_str(config, "site.admin_email", DEFAULT_ADMIN_EMAIL),
            admin_user=_str(config, "site.admin_user", DEFAULT_ADMIN_USER),
        )
        if len(set(settings.services)) != 3:
            raise ConfigError("services.db, services.app and services.helper must be distinct")
        return settings


@dataclass(frozen=True)
class SiteCredentials:
    """Credentials and site parameters read from the env store."""

    site_url: str
    site_title: str
    admin_user: str
    admin_pass: str
    admin_email: str
    mysql_database: str
    mysql_user: str
    mysql_password: str
    mysql_root_password: str
    salts: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, values: Mapping[str, str], salt_keys: List[str]) -> "SiteCredentials":
        required = {
            "site_url": "SITE_URL",
            "site_title": "SITE_TITLE",
            "admin_user": "ADMIN_USER",
            "admin_pass": "ADMIN_PASS",
            "admin_email": "ADMIN_EMAIL",
            "mysql_database": "MYSQL_DATABASE",
            "mysql_user": "MYSQL_USER",
            "mysql_password": "MYSQL_PASSWORD",
            "mysql_root_password": "MYSQL_ROOT_PASSWORD",
        }
        kwargs: Dict[str, Any] = {}
        empty = []
        for attr, key in required.items():
            value = values.get(key, "")
            if not value:
                empty.append(key)
            kwargs[attr] = value
        salts = {k: values.get(k, "") for k in salt_keys}
        empty += [k for k, v in salts.items() if not v]
        if empty:
            raise ConfigError(f"env store has empty values for: {', '.join(empty)}")
        kwargs["salts"] = salts
        return cls(**kwargs)
