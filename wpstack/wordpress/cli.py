# cli.py
# WP-CLI access for provisioning steps.
# - All wp commands go through WpCli; steps never assemble exec argv themselves.
# - Commands run in the transient helper service via the ComposeRunner.
# - Query helpers (is-installed) never raise on a non-zero exit; they answer False.
# - Mutating helpers raise StepExecutionError unless called with check=False.

from __future__ import annotations

import json
import logging
from typing import Any, List, Mapping, Optional, Sequence

from ..errors import StepExecutionError
from ..process import CommandResult, ComposeRunner


logger = logging.getLogger(__name__)


def _php_str(value: str) -> str:
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _parse_ids(text: str) -> List[int]:
    ids: List[int] = []
    for token in text.replace(",", " ").split():
        if token.isdigit():
            ids.append(int(token))
    return ids


class WpCli:
    def __init__(self, runner: ComposeRunner, service: str = "wpcli") -> None:
        self.runner = runner
        self.service = service

    def wp(self, *args: str, check: bool = True, input: Optional[str] = None) -> CommandResult:
        return self.runner.run(self.service, "wp", [str(a) for a in args], check=check, input=input)

    # core
    def core_is_installed(self) -> bool:
        return self.wp("core", "is-installed", check=False).ok

    def core_install(self, url: str, title: str, admin_user: str, admin_password: str, admin_email: str) -> CommandResult:
        return self.wp(
            "core",
            "install",
            f"--url={url}",
            f"--title={title}",
            f"--admin_user={admin_user}",
            f"--admin_password={admin_password}",
            f"--admin_email={admin_email}",
            "--skip-email",
        )

    # plugins
    def plugin_is_installed(self, slug: str) -> bool:
        return self.wp("plugin", "is-installed", slug, check=False).ok

    def plugin_install(self, slug: str, activate: bool = True) -> CommandResult:
        args = ["plugin", "install", slug]
        if activate:
            args.append("--activate")
        return self.wp(*args)

    def plugin_activate(self, slugs: Sequence[str]) -> CommandResult:
        return self.wp("plugin", "activate", *slugs)

    # themes
    def theme_activate(self, slug: str) -> CommandResult:
        return self.wp("theme", "activate", slug)

    def theme_mod_set(self, key: str, value: str) -> CommandResult:
        return self.wp("theme", "mod", "set", key, value)

    # options
    def option_update(self, name: str, value: Any, fmt: Optional[str] = None, check: bool = True) -> CommandResult:
        """Update an option. With ``fmt='json'`` the value is sent on stdin."""
        if fmt == "json":
            payload = value if isinstance(value, str) else json.dumps(value, separators=(",", ":"))
            return self.wp("option", "update", name, "--format=json", check=check, input=payload)
        args = ["option", "update", name, str(value)]
        if fmt:
            args.append(f"--format={fmt}")
        return self.wp(*args, check=check)

    # posts
    def post_ids(self, post_type: str, name: str) -> List[int]:
        res = self.wp("post", "list", f"--post_type={post_type}", f"--name={name}", "--field=ID", "--format=ids")
        return _parse_ids(res.stdout)

    def post_create(self, fields: Mapping[str, str]) -> int:
        """Create a post and return its id (``--porcelain``)."""
        args = ["post", "create"] + [f"--{k}={v}" for k, v in fields.items()] + ["--porcelain"]
        res = self.wp(*args)
        ids = _parse_ids(res.stdout)
        if not ids:
            raise StepExecutionError(res.argv, res.returncode, res.stdout, "post create did not print an id")
        return ids[-1]

    def post_update(self, post_id: int, fields: Mapping[str, str]) -> CommandResult:
        args = ["post", "update", str(post_id)] + [f"--{k}={v}" for k, v in fields.items()]
        return self.wp(*args)

    def eval(self, php: str) -> CommandResult:
        return self.wp("eval", php)

    def set_theme_mod_option(self, theme: str, key: str, int_value: int) -> CommandResult:
        """Set an integer entry in ``theme_mods_<theme>`` without touching other mods."""
        option = _php_str(f"theme_mods_{theme}")
        php = (
            f"$mods = get_option( {option}, array() ); "
            f"$mods[{_php_str(key)}] = (int) {int(int_value)}; "
            f"update_option( {option}, $mods );"
        )
        logger.debug("linking %s=%d into theme_mods_%s", key, int_value, theme)
        return self.eval(php)
