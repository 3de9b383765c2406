"""Tests for the wpstack command line"""
import io
from datetime import datetime

from rich.console import Console
from typer.testing import CliRunner

from wpstack.cli import app
from wpstack.envstore import EnvStore
from wpstack.hook import ConsoleHook


runner = CliRunner()


class TestCredentialsCommand:
    """Test `wpstack credentials`"""

    def test_creates_env_file(self, project):
        """Test that the store is created with every key"""
        result = runner.invoke(app, ["credentials", "-C", str(project)])
        assert result.exit_code == 0
        store = EnvStore(project / ".env")
        store.load()
        assert len(store.as_dict()) == 17
        assert "Added" in result.output

    def test_second_run_adds_nothing(self, project):
        """Test the nothing-to-add message"""
        runner.invoke(app, ["credentials", "-C", str(project)])
        result = runner.invoke(app, ["credentials", "-C", str(project)])
        assert result.exit_code == 0
        assert "nothing to add" in result.output

    def test_broken_store(self, project):
        """Test that a malformed store exits non-zero"""
        (project / ".env").write_text("garbage line\n")
        result = runner.invoke(app, ["credentials", "-C", str(project)])
        assert result.exit_code == 1


class TestProvisionCommand:
    """Test `wpstack provision`"""

    def test_success(self, project, fake_compose):
        """Test a full run exits zero"""
        result = runner.invoke(app, ["provision", "-C", str(project)])
        assert result.exit_code == 0, result.output
        assert "Environment provisioning complete" in result.output
        assert fake_compose.stops == ["wpcli"]

    def test_step_failure(self, project, fake_compose):
        """Test that a failed command exits 1 without printing the password"""
        fake_compose.fail("exec", "-T", "wpcli", "wp", "core", "install", stderr="Error: Database connection refused")
        result = runner.invoke(app, ["provision", "-C", str(project)])
        assert result.exit_code == 1
        assert "core_install" in result.output
        store = EnvStore(project / ".env")
        store.load()
        assert store.get("ADMIN_PASS") not in result.output
        assert fake_compose.stops == ["wpcli"]

    def test_failure_reported_once(self, project, fake_compose):
        """Test that a failed step's output appears a single time"""
        fake_compose.fail("exec", "-T", "wpcli", "wp", "core", "install", stderr="Error: Database connection refused")
        result = runner.invoke(app, ["provision", "-C", str(project)])
        assert result.exit_code == 1
        assert result.output.count("Database connection refused") == 1
        assert result.output.count("core_install") == 1

    def test_readiness_timeout_reported_once(self, project, fake_compose):
        """Test that a database that never answers is reported a single time"""
        (project / "wpstack.yaml").write_text("readiness:\n  max_attempts: 2\n  delay: 0\n")
        fake_compose.db_ready_after = None
        result = runner.invoke(app, ["provision", "-C", str(project)])
        assert result.exit_code == 1
        assert result.output.count("did not become ready after 2 attempts") == 1

    def test_missing_project_files(self, temp_dir, fake_compose):
        """Test that a project without a template exits 1"""
        result = runner.invoke(app, ["provision", "-C", str(temp_dir)])
        assert result.exit_code == 1
        assert "Missing" in result.output


class TestConsoleHook:
    """Test ConsoleHook output"""

    def test_timestamped_lines(self):
        """Test that state messages carry a timestamp"""
        buf = io.StringIO()
        hook = ConsoleHook(Console(file=buf, width=200), clock=lambda: datetime(2024, 1, 1, 12, 30, 5))
        hook.on_state("stack_starting", "Starting containers: db [x]")
        assert buf.getvalue().strip() == "[12:30:05] Starting containers: db [x]"

    def test_empty_message_is_silent(self):
        """Test that states without a message print nothing"""
        buf = io.StringIO()
        ConsoleHook(Console(file=buf)).on_state("stack_ready", "")
        assert buf.getvalue() == ""
