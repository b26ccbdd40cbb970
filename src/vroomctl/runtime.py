"""Container runtime access.

The lifecycle controller only needs four operations from a container
engine: create, start, stop and list running containers. ContainerRuntime
captures that seam; DockerCLIRuntime implements it by shelling out to the
``docker`` executable.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class RuntimeCommandError(Exception):
    """Raised when a container runtime command fails or cannot be run."""

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        stderr: str = "",
        message: str | None = None,
    ):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        if message is not None:
            message = f"'{' '.join(command)}' {message}"
        elif returncode is None:
            message = f"Could not run '{' '.join(command)}'{detail}"
        else:
            message = f"'{' '.join(command)}' exited with {returncode}{detail}"
        super().__init__(message)


@dataclass
class ContainerSpec:
    """Settings for a container to be created."""

    name: str
    image: str
    tag: str
    network: str | None = None
    volumes: dict[str, str] = field(default_factory=dict)
    environment: dict[str, str] = field(default_factory=dict)
    tty: bool = True

    @property
    def image_ref(self) -> str:
        return f"{self.image}:{self.tag}"


@dataclass
class RunningContainer:
    """One entry of the runtime's running-container listing."""

    id: str
    image: str
    names: str = ""

    def matches(self, fragment: str) -> bool:
        """Substring match against image and container names."""
        return fragment in self.image or fragment in self.names


class ContainerRuntime(ABC):
    """Minimal container engine interface used by the lifecycle controller."""

    @abstractmethod
    def create(self, spec: ContainerSpec) -> str:
        """Create a container and return its identifier."""

    @abstractmethod
    def start(self, container_id: str) -> None:
        """Start an existing container."""

    @abstractmethod
    def stop(self, container_id: str) -> None:
        """Stop a container."""

    @abstractmethod
    def list_running(self) -> list[RunningContainer]:
        """List running containers."""


class DockerCLIRuntime(ContainerRuntime):
    """ContainerRuntime backed by the docker command line client."""

    PS_FORMAT = "{{.ID}}\t{{.Image}}\t{{.Names}}"

    def __init__(self, executable: str = "docker"):
        self.executable = executable

    def _run(self, *args: str) -> str:
        command = [self.executable, *args]
        logger.debug(f"Running: {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            raise RuntimeCommandError(
                command, None, f"{self.executable} not found"
            ) from None

        if result.returncode != 0:
            raise RuntimeCommandError(command, result.returncode, result.stderr)

        return result.stdout

    def create_args(self, spec: ContainerSpec) -> list[str]:
        """Build the argument list for ``docker create``."""
        args = ["create"]
        if spec.tty:
            args.append("-t")
        args += ["--name", spec.name]
        if spec.network:
            args += ["--net", spec.network]
        for host_path, container_path in spec.volumes.items():
            args += ["-v", f"{host_path}:{container_path}"]
        for key, value in spec.environment.items():
            args += ["-e", f"{key}={value}"]
        args.append(spec.image_ref)
        return args

    def create(self, spec: ContainerSpec) -> str:
        output = self._run(*self.create_args(spec))
        # docker may print pull progress before the ID; the ID is the last line
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if not lines:
            raise RuntimeCommandError(
                [self.executable, *self.create_args(spec)],
                0,
                message="succeeded but printed no container ID",
            )
        return lines[-1]

    def start(self, container_id: str) -> None:
        self._run("start", container_id)

    def stop(self, container_id: str) -> None:
        self._run("stop", container_id)

    def list_running(self) -> list[RunningContainer]:
        output = self._run("ps", "--no-trunc", "--format", self.PS_FORMAT)

        containers = []
        for line in output.splitlines():
            if not line.strip():
                continue
            parts = line.split("\t")
            containers.append(
                RunningContainer(
                    id=parts[0].strip(),
                    image=parts[1].strip() if len(parts) > 1 else "",
                    names=parts[2].strip() if len(parts) > 2 else "",
                )
            )
        return containers
