from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from .config import Config
from .credentials import ensure_credentials
from .envstore import EnvStore
from .errors import StepExecutionError, WpstackError, redact_argv
from .hook import ConsoleHook
from .pipeline import Provisioner
from .settings import StackSettings


app = typer.Typer(name="wpstack", help="Provision a local Dockerized WordPress development stack.", no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    log_level = os.getenv("WPSTACK_LOG_LEVEL", "DEBUG" if verbose else "WARNING")
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_settings(project_dir: Optional[Path]) -> StackSettings:
    base = (project_dir or Path.cwd()).resolve()
    return StackSettings.from_config(Config.for_project(base), project_dir=base)


def cmd_provision(project_dir: Optional[Path], verbose: bool) -> int:
    try:
        settings = _load_settings(project_dir)
        provisioner = Provisioner(settings, hook=ConsoleHook(console, verbose=verbose))
        result = provisioner.execute()
    except StepExecutionError as e:
        err_console.print(f"Failed in {e.step or 'command'} (exit {e.returncode})", markup=False, highlight=False)
        err_console.print(f"$ {' '.join(redact_argv(e.argv))}", markup=False, highlight=False)
        output = (e.stderr or e.stdout or "").strip()
        if output:
            err_console.print(output, markup=False, highlight=False)
        return 1
    except WpstackError as e:
        err_console.print(f"Failed: {e}", markup=False, highlight=False)
        return 1
    except KeyboardInterrupt:
        err_console.print("Interrupted", markup=False)
        return 130
    if verbose:
        console.print_json(json.dumps(result))
    return 0


def cmd_credentials(project_dir: Optional[Path]) -> int:
    try:
        settings = _load_settings(project_dir)
        store = EnvStore(settings.env_file)
        store.load()
        ensure_credentials(store, settings)
    except WpstackError as e:
        err_console.print(f"Failed: {e}", markup=False, highlight=False)
        return 1
    if store.added:
        console.print(f"Added to {store.path}: {', '.join(store.added)}", markup=False)
    else:
        console.print(f"Found existing {store.path}; nothing to add", markup=False)
    return 0


@app.command("provision", help="Start the stack and install/configure WordPress (safe to repeat)")
def provision_command(
    project_dir: Optional[Path] = typer.Option(None, "--project-dir", "-C", help="Project directory (default: current directory)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show step details and debug logs"),
) -> None:
    _configure_logging(verbose)
    code = cmd_provision(project_dir, verbose)
    raise typer.Exit(code)


@app.command("credentials", help="Create or complete the .env credential store only")
def credentials_command(
    project_dir: Optional[Path] = typer.Option(None, "--project-dir", "-C", help="Project directory (default: current directory)"),
) -> None:
    _configure_logging(False)
    code = cmd_credentials(project_dir)
    raise typer.Exit(code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
