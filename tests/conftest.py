"""Shared pytest fixtures for vroomctl tests.

Unit and integration tests run without a container engine: the runtime is
replaced by tests.helpers.FakeRuntime.
"""

from pathlib import Path

import pytest

from tests.helpers import FakeRuntime
from vroomctl.config import VroomConfig
from vroomctl.store import ContainerIdStore

VROOM_ENV_VARS = [
    "VROOM_HOME_DIR",
    "VROOM_VERSION",
    "VROOM_DOCKER_NAME",
    "VROOM_ROUTER",
    "VROOM_STORE_MODE",
    "VROOM_CONF_TEMPLATE",
]


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_vroom_env(monkeypatch):
    """Keep the developer's VROOM_* variables out of the tests."""
    for name in VROOM_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def vroom_home(tmp_path: Path) -> Path:
    """Return an empty VROOM home directory."""
    home = tmp_path / "vroom-home"
    home.mkdir()
    return home


@pytest.fixture
def vroom_env(vroom_home: Path, monkeypatch) -> Path:
    """Point VROOM_HOME_DIR at the temporary home directory."""
    monkeypatch.setenv("VROOM_HOME_DIR", str(vroom_home))
    return vroom_home


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def vroom_config(vroom_home: Path) -> VroomConfig:
    """Default configuration rooted at the temporary home directory."""
    return VroomConfig(home_dir=vroom_home)


@pytest.fixture
def id_store(vroom_config: VroomConfig) -> ContainerIdStore:
    """Container ID store backed by an empty config file."""
    vroom_config.config_file.touch()
    return ContainerIdStore(vroom_config.config_file)


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    """Container runtime double."""
    return FakeRuntime()


@pytest.fixture
def cli_runtime(fake_runtime: FakeRuntime, monkeypatch) -> FakeRuntime:
    """Make the CLI use the fake runtime instead of docker."""
    monkeypatch.setattr(
        "vroomctl.main.create_runtime", lambda config: fake_runtime
    )
    return fake_runtime
