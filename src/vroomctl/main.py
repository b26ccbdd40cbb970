"""vroom CLI entry point."""

import logging
from dataclasses import dataclass

import click
import typer
from rich.markup import escape
from typer.core import TyperGroup

from . import __version__
from .config import ConfigurationError, VroomConfig, load_config
from .console import (
    console,
    print_error,
    print_info,
    print_remedy,
    print_success,
    print_warning,
)
from .controller import LifecycleController, NoContainerError, StartAction, short_id
from .files import UpdateStatus, ensure_directory, ensure_file, update_file
from .runtime import ContainerRuntime, DockerCLIRuntime, RuntimeCommandError
from .store import ContainerIdStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class LenientGroup(TyperGroup):
    """Command group that ignores unknown subcommands instead of failing.

    The group callback still runs for an unknown name, so the home
    directory is checked and provisioned before the process exits with 0.
    """

    def resolve_command(self, ctx: click.Context, args: list[str]):
        cmd_name = args[0]
        if cmd_name.startswith("-") or self.get_command(ctx, cmd_name) is not None:
            return super().resolve_command(ctx, args)

        logger.info(f"Ignoring unknown command '{cmd_name}'")
        ignored = click.Command(
            cmd_name,
            callback=lambda: None,
            context_settings={"ignore_unknown_options": True, "allow_extra_args": True},
        )
        return cmd_name, ignored, args[1:]


app = typer.Typer(
    name="vroom",
    cls=LenientGroup,
    help="Start and stop the local VROOM routing-engine container",
    invoke_without_command=True,
)


@dataclass
class AppContext:
    """State shared between the callback and the subcommands."""

    config: VroomConfig


def create_runtime(config: VroomConfig) -> ContainerRuntime:
    """Container runtime used by the CLI commands."""
    return DockerCLIRuntime(executable=config.docker_executable)


def build_controller(config: VroomConfig) -> LifecycleController:
    store = ContainerIdStore(config.config_file, mode=config.store_mode)
    return LifecycleController(config, store, create_runtime(config))


def provision_home(config: VroomConfig) -> None:
    """Make sure the conf directory and config file exist.

    When a conf template is configured it is copied into the conf directory
    if the copy there is missing or older.
    """
    if ensure_directory(config.conf_dir):
        logger.info(f"Created {config.conf_dir}")
    if ensure_file(config.config_file):
        logger.info(f"Created {config.config_file}")

    if config.conf_template is not None:
        destination = config.conf_dir / config.conf_template.name
        status = update_file(config.conf_template, destination)
        if not status.ok:
            print_warning(f"Conf template {config.conf_template} does not exist")
        elif status is not UpdateStatus.UP_TO_DATE:
            print_info(f"Updated {destination} ({status.value})")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"vroom version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show debug logging",
    ),
) -> None:
    """Start and stop the local VROOM routing-engine container.

    Requires VROOM_HOME_DIR to point at the directory holding the VROOM
    conf directory and container ID file.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    try:
        config = load_config()
    except ConfigurationError as e:
        print_error(f"[bold]Error:[/bold] {escape(str(e))}")
        print_error("Please fix the VROOM configuration and try again.")
        raise typer.Exit(1)

    try:
        provision_home(config)
    except OSError as e:
        print_error(f"[bold]Error:[/bold] {escape(str(e))}")
        print_error(f"Could not prepare VROOM home directory {escape(str(config.home_dir))}")
        raise typer.Exit(1)

    ctx.obj = AppContext(config=config)


@app.command()
def start(ctx: typer.Context) -> None:
    """Create the VROOM container if needed and start it.

    Exit status: 0 if OK, 1 if a container runtime command failed.
    """
    controller = build_controller(ctx.obj.config)
    console.print("Starting VROOM container.")

    try:
        result = controller.start()
    except (RuntimeCommandError, OSError) as e:
        print_error(f"[bold]Error:[/bold] {escape(str(e))}")
        raise typer.Exit(1)

    if result.action is StartAction.CREATED:
        print_success(f"Created and started VROOM container {result.short_id}")
    elif result.action is StartAction.STARTED:
        print_success(f"Started VROOM container {result.short_id}")
    else:
        print_info(
            f"VROOM container is already up and running with ID = {result.short_id}"
        )


@app.command()
def stop(ctx: typer.Context) -> None:
    """Stop the VROOM container.

    Exit status: 0 if OK, 1 if no container is on record or a container
    runtime command failed.
    """
    controller = build_controller(ctx.obj.config)
    console.print("Stopping VROOM container.")

    try:
        container_id = controller.stop()
    except NoContainerError:
        print_remedy(
            "There is no VROOM container available to work with.", "vroom start"
        )
        raise typer.Exit(1)
    except (RuntimeCommandError, OSError) as e:
        print_error(f"[bold]Error:[/bold] {escape(str(e))}")
        raise typer.Exit(1)

    print_success(f"Stopped VROOM container {short_id(container_id)}")


if __name__ == "__main__":
    app()
