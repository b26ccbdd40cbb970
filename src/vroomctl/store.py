"""Persistence of the VROOM container identifier.

The identifier lives in a flat ``KEY=value`` file under the VROOM home
directory:

    VROOM_CONTAINER_ID=5f3c1d...

Only one key is recognised. Two write modes exist:

- ``append`` (default): every write appends a new line. If the file already
  holds an identifier the new line is a duplicate, and reads keep returning
  the first one.
- ``upsert``: every write rewrites the file so exactly one identifier line
  remains. Unrelated lines are preserved.
"""

import logging
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

CONTAINER_ID_KEY = "VROOM_CONTAINER_ID"

# Undecodable bytes must not hide the identifier line
READ_OPTIONS = {"encoding": "utf-8", "errors": "replace"}


class WriteMode(Enum):
    """How ContainerIdStore.write treats an existing identifier."""

    APPEND = "append"
    UPSERT = "upsert"


def parse_line(line: str) -> tuple[str, str] | None:
    """Split a ``KEY=value`` line on its first ``=``.

    Returns:
        (key, value) with surrounding whitespace stripped, or None for blank
        lines, comments and lines without ``=``.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None

    key, value = stripped.split("=", 1)
    return key.strip(), value.strip()


class ContainerIdStore:
    """Reads and writes the container identifier record."""

    def __init__(self, path: Path, mode: WriteMode = WriteMode.APPEND):
        self.path = Path(path)
        self.mode = mode

    def read(self) -> str | None:
        """Return the first recorded identifier, or None if there is none."""
        logger.debug(f"Looking up {CONTAINER_ID_KEY} in {self.path}")

        if not self.path.exists():
            logger.debug(f"{self.path} does not exist")
            return None

        with open(self.path, **READ_OPTIONS) as f:
            for line in f:
                parsed = parse_line(line)
                if parsed is None:
                    continue
                key, value = parsed
                if key == CONTAINER_ID_KEY and value:
                    logger.debug(f"Found container ID {value}")
                    return value

        logger.debug("No container ID on record")
        return None

    def write(self, container_id: str) -> None:
        """Record a container identifier according to the store's mode."""
        container_id = container_id.strip()
        if not container_id:
            raise ValueError("Container ID must not be empty")

        record = f"{CONTAINER_ID_KEY}={container_id}\n"

        if self.mode is WriteMode.UPSERT:
            kept = []
            if self.path.exists():
                with open(self.path, **READ_OPTIONS) as f:
                    for line in f:
                        parsed = parse_line(line)
                        if parsed is not None and parsed[0] == CONTAINER_ID_KEY:
                            continue
                        kept.append(line if line.endswith("\n") else line + "\n")
            with open(self.path, "w", encoding="utf-8") as f:
                f.writelines(kept)
                f.write(record)
        else:
            prefix = ""
            if self.path.exists():
                content = self.path.read_text(**READ_OPTIONS)
                if content and not content.endswith("\n"):
                    prefix = "\n"
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(prefix + record)

        logger.info(f"Wrote {CONTAINER_ID_KEY} to {self.path} ({self.mode.value})")
