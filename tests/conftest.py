"""Pytest configuration and fixtures for wpstack tests"""
import os
import subprocess
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from wpstack.config import Config
from wpstack.settings import StackSettings


COMPOSE_TEMPLATE = """\
services:
  db:
    image: mariadb:11
    environment:
      MYSQL_ROOT_PASSWORD: ${MYSQL_ROOT_PASSWORD}
      MYSQL_DATABASE: ${MYSQL_DATABASE}
      MYSQL_USER: ${MYSQL_USER}
      MYSQL_PASSWORD: ${MYSQL_PASSWORD}
    volumes:
      - ./db:/var/lib/mysql
  wordpress:
    image: wordpress:php8.2-apache
    depends_on: [db]
    ports: ["8080:80"]
    volumes:
      - ./wordpress:/var/www/html
  wpcli:
    image: wordpress:cli
    depends_on: [db, wordpress]
    volumes:
      - ./wordpress:/var/www/html
    command: ["sleep", "infinity"]
"""


def _done(argv, rc=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(argv, rc, stdout, stderr)


def _flags(args):
    """Parse --key=value tokens into a dict."""
    out = {}
    for a in args:
        if a.startswith("--") and "=" in a:
            k, v = a[2:].split("=", 1)
            out[k] = v
    return out


class FakeCompose:
    """Simulated `docker compose` + WordPress state, patched into subprocess.run.

    Records every compose invocation (global -f/--env-file options stripped)
    and answers like the real tools would for the commands wpstack issues.
    """

    def __init__(self):
        self.calls = []
        self.inputs = []
        self.envs = []
        self.db_ready_after = 1
        self.pings = 0
        self.core_installed = False
        self.plugins = set()
        self.active_plugins = set()
        self.active_theme = None
        self.options = {}
        self.theme_mods = {}
        self.posts = {}
        self.next_post_id = 100
        self.evals = []
        self.running = set()
        self.stops = []
        self.copies = []
        self.failing = {}

    # ── helpers for assertions ──────────────────────────────────────────
    def exec_calls(self, service=None):
        out = []
        for args in self.calls:
            if args[:2] == ["exec", "-T"]:
                if service is None or args[2] == service:
                    out.append(args[2:])
        return out

    def count(self, *prefix):
        """Count exec calls (any service) whose command starts with prefix."""
        n = 0
        for call in self.exec_calls():
            if tuple(call[1 : 1 + len(prefix)]) == prefix:
                n += 1
        return n

    def fail(self, *prefix, rc=1, stderr="Error: simulated failure"):
        """Make compose calls starting with prefix (after 'compose') fail."""
        self.failing[tuple(prefix)] = (rc, stderr)

    def add_post(self, post_type, name, content=""):
        pid = self.next_post_id
        self.next_post_id += 1
        self.posts[pid] = {"post_type": post_type, "post_name": name, "post_content": content}
        return pid

    # ── subprocess.run replacement ──────────────────────────────────────
    def __call__(self, argv, cwd=None, input=None, capture_output=None, text=None, timeout=None, check=False, env=None, **kwargs):
        argv = [str(a) for a in argv]
        args = argv[1:]
        if args == ["compose", "version"]:
            return _done(argv, 0, "Docker Compose version v2.29.0")
        assert args[0] == "compose", argv
        args = args[1:]
        while args and args[0] in ("-f", "--env-file"):
            args = args[2:]
        self.calls.append(args)
        self.inputs.append(input)
        self.envs.append(dict(os.environ if env is None else env))

        for prefix, (rc, err) in self.failing.items():
            if tuple(args[: len(prefix)]) == prefix:
                return _done(argv, rc, "", err)

        cmd = args[0]
        if cmd == "up":
            self.running.update(a for a in args[1:] if not a.startswith("-"))
            return _done(argv)
        if cmd == "stop":
            self.stops.append(args[1])
            self.running.discard(args[1])
            return _done(argv)
        if cmd == "cp":
            self.copies.append((args[1], args[2]))
            return _done(argv)
        if cmd == "exec":
            return self._exec(argv, args[2], args[3:], input)
        return _done(argv, 1, "", f"unknown command {cmd}")

    def _exec(self, argv, service, command, input):
        if service == "db" and command[:2] == ["mariadb-admin", "ping"]:
            self.pings += 1
            ok = self.db_ready_after is not None and self.pings >= self.db_ready_after
            return _done(argv, 0 if ok else 1, "mysqld is alive" if ok else "", "" if ok else "connect failed")
        if command[0] != "wp":
            return _done(argv)
        return self._wp(argv, command[1:], input)

    def _wp(self, argv, wp, input):
        flags = _flags(wp)
        head = wp[:2]
        if head == ["core", "is-installed"]:
            return _done(argv, 0 if self.core_installed else 1)
        if head == ["core", "install"]:
            self.core_installed = True
            return _done(argv, 0, "Success: WordPress installed successfully.")
        if head == ["plugin", "is-installed"]:
            return _done(argv, 0 if wp[2] in self.plugins else 1)
        if head == ["plugin", "install"]:
            self.plugins.add(wp[2])
            if "--activate" in wp:
                self.active_plugins.add(wp[2])
            return _done(argv, 0, f"Plugin '{wp[2]}' activated.")
        if head == ["plugin", "activate"]:
            missing = [p for p in wp[2:] if p not in self.plugins]
            if missing:
                return _done(argv, 1, "", f"Error: The '{missing[0]}' plugin could not be found.")
            self.active_plugins.update(wp[2:])
            return _done(argv, 0, "Success")
        if head == ["theme", "activate"]:
            self.active_theme = wp[2]
            return _done(argv, 0, f"Success: Switched to '{wp[2]}' theme.")
        if wp[:3] == ["theme", "mod", "set"]:
            self.theme_mods[wp[3]] = wp[4]
            return _done(argv)
        if head == ["option", "update"]:
            if "--format=json" in wp:
                self.options[wp[2]] = input
            else:
                self.options[wp[2]] = wp[3]
            return _done(argv, 0, f"Success: Updated '{wp[2]}' option.")
        if head == ["post", "list"]:
            ids = [
                str(pid)
                for pid, p in sorted(self.posts.items())
                if p["post_type"] == flags.get("post_type") and p["post_name"] == flags.get("name")
            ]
            return _done(argv, 0, " ".join(ids) + "\r\n")
        if head == ["post", "create"]:
            pid = self.add_post(flags.get("post_type"), flags.get("post_name"), flags.get("post_content", ""))
            self.posts[pid]["post_title"] = flags.get("post_title")
            return _done(argv, 0, f"{pid}\n")
        if head == ["post", "update"]:
            pid = int(wp[2])
            if pid not in self.posts:
                return _done(argv, 1, "", f"Error: Could not find the post with ID {pid}.")
            self.posts[pid].update(flags)
            return _done(argv, 0, f"Success: Updated post {pid}.")
        if head[:1] == ["eval"]:
            self.evals.append(wp[1])
            return _done(argv)
        return _done(argv, 1, "", f"Error: unhandled wp command {' '.join(wp)}")


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project(temp_dir):
    """Provide a project directory with a compose template and theme source"""
    (temp_dir / "docker-compose.yml.template").write_text(COMPOSE_TEMPLATE)
    theme = temp_dir / "themes" / "nightraven"
    theme.mkdir(parents=True)
    (theme / "style.css").write_text("/* Theme Name: Nightraven */\n")
    (theme / "functions.php").write_text("<?php\n")
    return temp_dir


@pytest.fixture
def settings(project):
    """StackSettings for the test project with default configuration"""
    return StackSettings.from_config(Config.for_project(project), project_dir=project)


@pytest.fixture
def fake_compose():
    """Patch subprocess.run and PATH lookup with a simulated docker compose"""
    fake = FakeCompose()
    with patch("subprocess.run", side_effect=fake), patch("shutil.which", return_value="/usr/bin/docker"):
        yield fake
