"""JSON state document storage."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from cronloom.engine.errors import StateError
from cronloom.models import SchedulerStateDocument

logger = logging.getLogger(__name__)


class StateStore:
    """Reads and writes a SchedulerStateDocument at a fixed path."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, document: SchedulerStateDocument) -> None:
        """Write the document atomically.

        The JSON is written to a temporary file in the target directory and
        then moved over the old document, so readers never see a partial file.

        Args:
            document: State to persist.

        Raises:
            StateError: If the file cannot be written.
        """
        payload = document.model_dump_json(indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StateError(f"Failed to write state file {self.path}: {e}", str(self.path)) from e

        logger.debug(f"Saved state for {len(document.jobs)} job(s) to {self.path}")

    def load(self) -> SchedulerStateDocument | None:
        """Read the document.

        Returns:
            The parsed document, or None if the file does not exist.

        Raises:
            StateError: If the file is unreadable or not a valid document.
        """
        if not self.path.exists():
            return None

        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StateError(f"Failed to read state file {self.path}: {e}", str(self.path)) from e

        try:
            return SchedulerStateDocument.model_validate_json(content)
        except ValidationError as e:
            raise StateError(f"Invalid state file {self.path}: {e}", str(self.path)) from e

    def clear(self) -> bool:
        """Delete the document.

        Returns:
            True if a file was removed.
        """
        if not self.path.exists():
            return False
        self.path.unlink()
        logger.debug(f"Removed state file {self.path}")
        return True
