"""VROOM container lifecycle.

The controller tracks one container through three states:

    UNPROVISIONED        no identifier on record
    PROVISIONED_STOPPED  identifier on record, container not running
    PROVISIONED_RUNNING  identifier on record, container running

``start`` moves any state to PROVISIONED_RUNNING, creating the container
first when nothing is on record. ``stop`` requires a recorded identifier
and always asks the runtime to stop it.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .config import VroomConfig
from .runtime import ContainerRuntime, ContainerSpec
from .store import ContainerIdStore

logger = logging.getLogger(__name__)

ROUTER_ENV_VAR = "VROOM_ROUTER"
SHORT_ID_LENGTH = 12


class NoContainerError(Exception):
    """Raised when an operation needs a container but none is on record."""

    def __init__(self, config_file):
        self.config_file = config_file
        super().__init__(f"No VROOM container ID recorded in {config_file}")


class ContainerState(Enum):
    """Lifecycle state of the managed container."""

    UNPROVISIONED = "unprovisioned"
    PROVISIONED_STOPPED = "provisioned-stopped"
    PROVISIONED_RUNNING = "provisioned-running"


class StartAction(Enum):
    """What start() had to do."""

    CREATED = "created"
    STARTED = "started"
    ALREADY_RUNNING = "already_running"


@dataclass
class StartResult:
    """Result of a start operation."""

    action: StartAction
    container_id: str

    @property
    def short_id(self) -> str:
        return short_id(self.container_id)


def short_id(container_id: str) -> str:
    """Abbreviate a container identifier for display."""
    return container_id[:SHORT_ID_LENGTH]


class LifecycleController:
    """Starts and stops the VROOM container."""

    def __init__(
        self,
        config: VroomConfig,
        store: ContainerIdStore,
        runtime: ContainerRuntime,
    ):
        self.config = config
        self.store = store
        self.runtime = runtime

    def container_spec(self) -> ContainerSpec:
        """Settings used when the container has to be created."""
        return ContainerSpec(
            name=self.config.container_name,
            image=self.config.image,
            tag=self.config.version,
            network=self.config.network,
            volumes={str(self.config.conf_dir): self.config.conf_mount},
            environment={ROUTER_ENV_VAR: self.config.router},
        )

    def is_running(self) -> bool:
        """Check whether a container of the VROOM image is running."""
        running = self.runtime.list_running()
        return any(container.matches(self.config.image) for container in running)

    def state(self) -> ContainerState:
        if self.store.read() is None:
            return ContainerState.UNPROVISIONED
        if self.is_running():
            return ContainerState.PROVISIONED_RUNNING
        return ContainerState.PROVISIONED_STOPPED

    def start(self) -> StartResult:
        """Bring the container to the running state.

        Returns:
            StartResult describing whether the container was created,
            started or already running.

        Raises:
            RuntimeCommandError: If a runtime command fails
        """
        container_id = self.store.read()

        if container_id is None:
            logger.info("No container on record, creating one")
            container_id = self.runtime.create(self.container_spec())
            self.store.write(container_id)
            self.runtime.start(container_id)
            logger.info(f"Created and started container {short_id(container_id)}")
            return StartResult(StartAction.CREATED, container_id)

        logger.debug(f"Checking if container {short_id(container_id)} is running")
        if self.is_running():
            logger.info(f"Container {short_id(container_id)} is already running")
            return StartResult(StartAction.ALREADY_RUNNING, container_id)

        self.runtime.start(container_id)
        logger.info(f"Started container {short_id(container_id)}")
        return StartResult(StartAction.STARTED, container_id)

    def stop(self) -> str:
        """Stop the recorded container.

        The stop command is issued even if the container is not running.

        Returns:
            The identifier of the stopped container

        Raises:
            NoContainerError: If no container ID is on record
            RuntimeCommandError: If the runtime command fails
        """
        container_id = self.store.read()
        if container_id is None:
            raise NoContainerError(self.store.path)

        self.runtime.stop(container_id)
        logger.info(f"Stopped container {short_id(container_id)}")
        return container_id
