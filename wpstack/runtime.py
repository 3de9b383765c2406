from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Iterator

from .errors import WpstackError
from .process import ComposeRunner
from .settings import SiteCredentials, StackSettings


logger = logging.getLogger(__name__)


class Runtime(ABC):
    """Abstract runtime environment provisioner."""

    @abstractmethod
    def provision(self) -> None:
        """Start the environment (idempotent)."""

    @abstractmethod
    def teardown(self, check: bool = True) -> None:
        """Release what provisioning must not leave behind."""


class ComposeStack(Runtime):
    """The db/app/helper services of one compose project.

    ``provision`` starts all three detached. ``teardown`` stops only the
    transient helper; db and app stay up for development. Teardown runs at
    most once per instance.
    """

    def __init__(self, runner: ComposeRunner, settings: StackSettings) -> None:
        self.runner = runner
        self.settings = settings
        self.stop_count = 0
        self._stopped = False

    def provision(self) -> None:
        self.runner.up(self.settings.services)

    def teardown(self, check: bool = True) -> None:
        if self._stopped:
            return
        self._stopped = True
        self.stop_count += 1
        if check:
            self.runner.stop(self.settings.helper_service)
            return
        try:
            self.runner.stop(self.settings.helper_service, check=False)
        except WpstackError as e:
            logger.warning("could not stop %s: %s", self.settings.helper_service, e)

    @contextmanager
    def helper_session(self) -> Iterator["ComposeStack"]:
        """Scope in which the helper may run; it is stopped on every exit path.

        On an error or interruption the stop is attempted without letting
        its own failure replace the original exception.
        """
        try:
            yield self
        except BaseException:
            self.teardown(check=False)
            raise
        self.teardown(check=True)

    def database_probe(self, credentials: SiteCredentials) -> Callable[[], bool]:
        """Probe answering whether the database accepts connections."""
        args = [
            "ping",
            "-h",
            "127.0.0.1",
            "-uroot",
            f"-p{credentials.mysql_root_password}",
            "--silent",
        ]

        def probe() -> bool:
            return self.runner.run(self.settings.db_service, "mariadb-admin", args, check=False).ok

        return probe
