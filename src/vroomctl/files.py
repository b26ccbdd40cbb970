"""Idempotent filesystem provisioning for the VROOM home directory."""

import logging
import shutil
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class UpdateStatus(Enum):
    """Outcome of update_file."""

    COPIED = "copied"
    REPLACED = "replaced"
    UP_TO_DATE = "up_to_date"
    SOURCE_MISSING = "source_missing"

    @property
    def ok(self) -> bool:
        return self is not UpdateStatus.SOURCE_MISSING


def update_file(source: Path, destination: Path) -> UpdateStatus:
    """Copy source over destination if destination is missing or older.

    Modification times are compared strictly: a destination with the same
    mtime as the source counts as up to date. Metadata is copied along with
    the content, so a freshly replaced destination is never older than its
    source afterwards.

    Args:
        source: File to copy from
        destination: File to create or refresh

    Returns:
        UpdateStatus describing what happened. SOURCE_MISSING means nothing
        was written.
    """
    source = Path(source)
    destination = Path(destination)
    logger.debug(f"Updating {destination} with {source}")

    if not source.is_file():
        logger.error(f"Source file {source} does not exist")
        return UpdateStatus.SOURCE_MISSING

    if not destination.is_file():
        logger.info(f"{destination} does not exist, copying {source}")
        shutil.copy2(source, destination)
        return UpdateStatus.COPIED

    if source.stat().st_mtime > destination.stat().st_mtime:
        logger.info(f"{destination} is older than {source}, replacing it")
        shutil.copy2(source, destination)
        return UpdateStatus.REPLACED

    logger.debug(f"{destination} is up to date with {source}")
    return UpdateStatus.UP_TO_DATE


def ensure_directory(path: Path) -> bool:
    """Create a directory and its parents if missing.

    Returns:
        True if the directory was created, False if it already existed
    """
    path = Path(path)
    if path.is_dir():
        logger.debug(f"{path} exists, nothing to create")
        return False

    logger.info(f"Creating directory {path}")
    path.mkdir(parents=True, exist_ok=True)
    return True


def ensure_file(path: Path) -> bool:
    """Create an empty file if missing. Returns True if it was created."""
    path = Path(path)
    if path.is_file():
        return False

    logger.info(f"{path} does not exist, creating an empty one")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()
    return True
