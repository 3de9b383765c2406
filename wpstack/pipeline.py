from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .compose import check_services, load_template, render_compose_file
from .credentials import ensure_credentials
from .envstore import EnvStore
from .envvalidate import EnvValidator, PathValidator, ToolValidator, raise_for_issues, validate
from .hook import Hook
from .process import ComposeRunner
from .readiness import wait_until_ready
from .runner import Runner
from .runtime import ComposeStack
from .settings import SiteCredentials, StackSettings
from .step import StepContext
from .wordpress import (
    CoreInstallStep,
    CustomCssStep,
    OptionStep,
    PluginsStep,
    ThemeActivateStep,
    ThemeDeployStep,
    ThemeOptionsStep,
    WpCli,
    WpContentPermissionsStep,
)


logger = logging.getLogger(__name__)


class State(str, Enum):
    INIT = "init"
    CONFIG_READY = "config_ready"
    STACK_STARTING = "stack_starting"
    STACK_READY = "stack_ready"
    WAITING_FOR_DEPENDENCY = "waiting_for_dependency"
    DEPENDENCY_READY = "dependency_ready"
    BASE_INSTALLING = "base_installing"
    PLUGINS_INSTALLING = "plugins_installing"
    THEME_DEPLOYING = "theme_deploying"
    PREFERENCES_APPLYING = "preferences_applying"
    HELPER_STOPPED = "helper_stopped"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = (State.DONE, State.FAILED)


class Provisioner:
    """Drive one provisioning run through its states, in order.

    Config file handling, stack start, database wait and the install and
    configure phases run strictly one after another. Any unrecoverable error
    moves the run to FAILED and is re-raised; the helper service is stopped
    on every exit path.
    """

    def __init__(
        self,
        settings: StackSettings,
        runner: Optional[ComposeRunner] = None,
        hook: Optional[Hook] = None,
        validators: Optional[List[EnvValidator]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.runner = runner or ComposeRunner(
            settings.project_dir,
            compose_file=settings.compose_file,
            env_file=settings.env_file,
        )
        self.hook = hook
        self.validators = validators if validators is not None else self.default_validators()
        self.sleep = sleep
        self.store = EnvStore(settings.env_file)
        self.stack = ComposeStack(self.runner, settings)
        self.wp = WpCli(self.runner, settings.helper_service)
        self.credentials: Optional[SiteCredentials] = None
        self.compose_rendered = False
        self.state = State.INIT
        self.history: List[State] = [State.INIT]
        self.runners: List[Tuple[State, Runner]] = []
        self.error: Optional[BaseException] = None

    def default_validators(self) -> List[EnvValidator]:
        s = self.settings
        paths = [(s.compose_template, "file"), (s.theme_source, "dir")]
        if s.custom_css_file is not None:
            paths.append((s.custom_css_file, "file"))
        return [
            ToolValidator([{"name": self.runner.binary, "probe_args": ["compose", "version"]}]),
            PathValidator(paths),
        ]

    def _notify(self, method: str, *args: Any) -> None:
        if self.hook is None:
            return
        try:
            getattr(self.hook, method)(*args)
        except Exception:  # noqa: BLE001
            logger.debug("hook %s failed", method, exc_info=True)

    def _transition(self, state: State, message: str = "") -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"cannot leave terminal state {self.state.value}")
        logger.debug("state %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)
        self._notify("on_state", state, message)

    def prepare(self) -> SiteCredentials:
        """Validate, then load config and credentials and render files.

        Everything that can fail for a missing or broken input is checked
        before the first write.
        """
        s = self.settings
        raise_for_issues(validate(self.validators))
        self.store.load()
        check_services(load_template(s.compose_template), s.services, s.compose_template)

        self.credentials = ensure_credentials(self.store, s)
        self.runner.env.update(self.store.as_dict())
        self.compose_rendered = render_compose_file(s.compose_template, s.compose_file, s.services)
        for name in s.bind_dirs:
            (s.project_dir / name).mkdir(parents=True, exist_ok=True)
        return self.credentials

    def phases(self, context: StepContext) -> List[Tuple[State, str, Runner]]:
        s = self.settings
        preference_steps = [OptionStep(context, setting) for setting in s.preferences]
        return [
            (
                State.BASE_INSTALLING,
                "Installing WordPress core",
                Runner(
                    "base",
                    [
                        WpContentPermissionsStep("wp_content_permissions", context),
                        CoreInstallStep("core_install", context),
                    ],
                    hook=self.hook,
                ),
            ),
            (
                State.PLUGINS_INSTALLING,
                "Installing required plugins",
                Runner("plugins", [PluginsStep("plugins", context)], hook=self.hook),
            ),
            (
                State.THEME_DEPLOYING,
                "Ensuring custom theme state",
                Runner(
                    "theme",
                    [
                        ThemeDeployStep("theme_deploy", context),
                        ThemeActivateStep("theme_activate", context),
                    ],
                    hook=self.hook,
                ),
            ),
            (
                State.PREFERENCES_APPLYING,
                "Applying brand color system and site preferences",
                Runner(
                    "preferences",
                    [
                        ThemeOptionsStep("theme_options", context),
                        CustomCssStep("custom_css", context),
                        *preference_steps,
                    ],
                    hook=self.hook,
                ),
            ),
        ]

    def execute(self) -> Dict[str, Any]:
        s = self.settings
        self._notify("on_pipeline_start", self)
        try:
            self._notify("on_state", self.state, "Ensuring required files and configuration")
            credentials = self.prepare()
            self._transition(State.CONFIG_READY)

            with self.stack.helper_session():
                self._transition(State.STACK_STARTING, f"Starting containers: {' '.join(s.services)}")
                self.stack.provision()
                self._transition(State.STACK_READY)

                self._transition(State.WAITING_FOR_DEPENDENCY, "Waiting for the database to become ready")
                wait_until_ready(
                    self.stack.database_probe(credentials),
                    max_attempts=s.retry.max_attempts,
                    delay=s.retry.delay,
                    sleep=self.sleep,
                    target=f"database service '{s.db_service}'",
                )
                self._transition(State.DEPENDENCY_READY, "Database is ready")

                context = StepContext(runner=self.runner, wp=self.wp, settings=s, credentials=credentials)
                for state, message, runner in self.phases(context):
                    self._transition(state, message)
                    self.runners.append((state, runner))
                    runner.execute()

            self._transition(State.HELPER_STOPPED, f"Stopped {s.helper_service} helper")
            self._transition(State.DONE, "Environment provisioning complete (db/wordpress left running)")
        except BaseException as e:
            self.error = e
            self._transition(State.FAILED)
            if isinstance(e, Exception):
                self._notify("on_error", self.history[-2].value, e)
            raise
        summary = self.summary()
        self._notify("on_pipeline_end", self, summary)
        return summary

    def summary(self) -> Dict[str, Any]:
        return {
            "status": "success" if self.state == State.DONE else "error",
            "state": self.state.value,
            "history": [st.value for st in self.history],
            "env": {"path": str(self.store.path), "added": list(self.store.added)},
            "compose_rendered": self.compose_rendered,
            "helper_stops": self.stack.stop_count,
            "steps": {state.value: dict(runner.results) for state, runner in self.runners},
        }
