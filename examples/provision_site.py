#!/usr/bin/env python3
"""
Example: provisioning from Python instead of the CLI

Equivalent to `wpstack provision -C examples/site`, with a custom hook that
prints every state transition.

Usage:
  python examples/provision_site.py
"""
from pathlib import Path

from wpstack import Config, ConsoleHook, Provisioner, StackSettings


class TransitionHook(ConsoleHook):
    def on_state(self, state, message):
        self.console.print(f"[cyan]{state.value}[/cyan]")
        super().on_state(state, message)


project = Path(__file__).parent / "site"
settings = StackSettings.from_config(Config.for_project(project), project_dir=project)

provisioner = Provisioner(settings, hook=TransitionHook(verbose=True))
summary = provisioner.execute()
print(f"{summary['state']}: helper stopped {summary['helper_stops']} time(s)")
