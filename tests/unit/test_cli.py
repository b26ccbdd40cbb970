"""Unit tests for the vroom CLI.

Uses typer's CliRunner with the container runtime replaced by FakeRuntime.
"""

from pathlib import Path

from typer.testing import CliRunner

from vroomctl import __version__
from vroomctl.main import app
from vroomctl.store import CONTAINER_ID_KEY

runner = CliRunner()

RECORDED_ID = "c0ffee0000001234567890"


def _record(home: Path, container_id: str = RECORDED_ID) -> None:
    (home / "vroom.config").write_text(f"{CONTAINER_ID_KEY}={container_id}\n")


class TestCallback:
    """Tests for the top-level callback."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_home_fails_before_dispatch(self, cli_runtime):
        """Without VROOM_HOME_DIR nothing is dispatched."""
        result = runner.invoke(app, ["start"])

        assert result.exit_code == 1
        assert "VROOM_HOME_DIR" in result.output
        assert cli_runtime.created == []
        assert cli_runtime.started == []

    def test_no_command_provisions_and_succeeds(self, vroom_env: Path, cli_runtime):
        """Without a subcommand only the home directory is provisioned."""
        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert (vroom_env / "conf").is_dir()
        assert (vroom_env / "vroom.config").is_file()
        assert cli_runtime.created == []

    def test_invalid_settings_file(self, vroom_env: Path, cli_runtime):
        (vroom_env / "vroom.yaml").write_text("container: [oops\n")

        result = runner.invoke(app, ["start"])

        assert result.exit_code == 1
        assert cli_runtime.created == []

    def test_conf_template_copied(self, vroom_env: Path, tmp_path: Path, monkeypatch, cli_runtime):
        template = tmp_path / "config.yml"
        template.write_text("cliArgs:\n  router: osrm\n")
        monkeypatch.setenv("VROOM_CONF_TEMPLATE", str(template))

        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert (vroom_env / "conf" / "config.yml").read_text() == template.read_text()

    def test_missing_conf_template_warns(self, vroom_env: Path, tmp_path: Path, monkeypatch, cli_runtime):
        monkeypatch.setenv("VROOM_CONF_TEMPLATE", str(tmp_path / "missing.yml"))

        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "Conf template" in result.output

    def test_unknown_command_is_ignored(self, vroom_env: Path, cli_runtime):
        """An unknown subcommand provisions the home directory and exits 0."""
        result = runner.invoke(app, ["restart", "--now"])

        assert result.exit_code == 0
        assert (vroom_env / "conf").is_dir()
        assert (vroom_env / "vroom.config").is_file()
        assert cli_runtime.created == []
        assert cli_runtime.started == []
        assert cli_runtime.stopped == []

    def test_home_is_a_file(self, tmp_path: Path, monkeypatch, cli_runtime):
        """A home path that cannot hold the conf directory fails cleanly."""
        home = tmp_path / "home-file"
        home.write_text("not a directory\n")
        monkeypatch.setenv("VROOM_HOME_DIR", str(home))

        result = runner.invoke(app, ["start"])

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Could not prepare VROOM home directory" in result.output
        assert cli_runtime.created == []
        assert cli_runtime.started == []


class TestStartCommand:
    """Tests for vroom start."""

    def test_start_creates_container(self, vroom_env: Path, cli_runtime):
        result = runner.invoke(app, ["start"])

        assert result.exit_code == 0
        assert "Created and started" in result.output
        assert cli_runtime.started == [cli_runtime.next_id]
        content = (vroom_env / "vroom.config").read_text()
        assert content == f"{CONTAINER_ID_KEY}={cli_runtime.next_id}\n"

    def test_start_already_running(self, vroom_env: Path, cli_runtime):
        """Recorded and running: no start command, exit 0."""
        _record(vroom_env)
        cli_runtime.running.add(RECORDED_ID)

        result = runner.invoke(app, ["start"])

        assert result.exit_code == 0
        assert "already up and running" in result.output
        assert cli_runtime.started == []

    def test_start_not_running(self, vroom_env: Path, cli_runtime):
        """Recorded but stopped: start issued for the recorded ID, exit 0."""
        _record(vroom_env)

        result = runner.invoke(app, ["start"])

        assert result.exit_code == 0
        assert cli_runtime.started == [RECORDED_ID]
        assert cli_runtime.created == []

    def test_start_runtime_failure(self, vroom_env: Path, cli_runtime):
        cli_runtime.fail_on.add("create")

        result = runner.invoke(app, ["start"])

        assert result.exit_code == 1
        assert "create failed" in result.output


class TestStopCommand:
    """Tests for vroom stop."""

    def test_stop_without_container(self, vroom_env: Path, cli_runtime):
        """Empty store: exit 1, remediation shown, runtime untouched."""
        result = runner.invoke(app, ["stop"])

        assert result.exit_code == 1
        assert "vroom start" in result.output
        assert cli_runtime.stopped == []

    def test_stop_recorded_container(self, vroom_env: Path, cli_runtime):
        _record(vroom_env)

        result = runner.invoke(app, ["stop"])

        assert result.exit_code == 0
        assert cli_runtime.stopped == [RECORDED_ID]
        assert RECORDED_ID[:12] in result.output

    def test_stop_with_undecodable_config_file(self, vroom_env: Path, cli_runtime):
        (vroom_env / "vroom.config").write_bytes(
            b"\xff\xfe junk\n" + f"{CONTAINER_ID_KEY}={RECORDED_ID}\n".encode()
        )

        result = runner.invoke(app, ["stop"])

        assert result.exit_code == 0
        assert cli_runtime.stopped == [RECORDED_ID]

    def test_stop_runtime_failure(self, vroom_env: Path, cli_runtime):
        _record(vroom_env)
        cli_runtime.fail_on.add("stop")

        result = runner.invoke(app, ["stop"])

        assert result.exit_code == 1
