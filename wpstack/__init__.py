"""
wpstack: provision a local Dockerized WordPress development stack.

This package provides the provisioning primitives:
- EnvStore: persisted KEY="value" credential store with generated secrets.
- ComposeRunner: runs commands against docker compose services.
- wait_until_ready: bounded, fixed-delay readiness polling.
- Step / Runner: idempotent steps executed in order, fail-fast.
- ComposeStack: starts the stack and scopes the transient helper's lifetime.
- Provisioner: the state machine sequencing a full run.

Running a provisioning twice is safe: every step checks existing state first.
"""

from .config import Config
from .envstore import EnvStore, random_hex
from .errors import (
    ConfigError,
    MissingDependencyError,
    ReadinessTimeoutError,
    StepExecutionError,
    WpstackError,
)
from .hook import ConsoleHook, Hook
from .pipeline import Provisioner, State
from .process import CommandResult, ComposeRunner
from .readiness import RetryPolicy, wait_until_ready
from .runner import Runner
from .runtime import ComposeStack, Runtime
from .settings import OptionSetting, SiteCredentials, StackSettings
from .step import Step, StepContext

__version__ = "0.1.0"

__all__ = [
    "Config",
    "EnvStore",
    "random_hex",
    # Errors
    "WpstackError",
    "MissingDependencyError",
    "ConfigError",
    "ReadinessTimeoutError",
    "StepExecutionError",
    # Hooks
    "Hook",
    "ConsoleHook",
    # Execution
    "CommandResult",
    "ComposeRunner",
    "RetryPolicy",
    "wait_until_ready",
    "Step",
    "StepContext",
    "Runner",
    "Runtime",
    "ComposeStack",
    "Provisioner",
    "State",
    # Settings
    "OptionSetting",
    "SiteCredentials",
    "StackSettings",
]
