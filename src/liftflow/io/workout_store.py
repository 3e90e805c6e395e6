"""
JSON snapshot storage for the current workout.

The autosave file holds one snapshot document (see serializers.py); every
change rewrites it whole.  Export writes a timestamped copy, import reads any
snapshot document back.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from ..core.models import WorkoutState
from .serializers import ValidationError, dict_to_state, state_to_dict

logger = logging.getLogger(__name__)


class LoadError(ValidationError):
    """Raised when a stored or imported workout cannot be read."""

    pass


def export_filename(when: datetime) -> str:
    """workout-YYYYMMDD-HHMM.json for the given instant (UTC)."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc).strftime("workout-%Y%m%d-%H%M.json")


def read_state_file(path: str | Path) -> WorkoutState:
    """
    Read one snapshot document.

    Raises:
        FileNotFoundError: If the file does not exist
        LoadError: If the file is not UTF-8 JSON or not a valid snapshot
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise LoadError(f"Invalid workout file format: {path} (not UTF-8 text)") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid workout file format: {path} ({e})") from e
    try:
        return dict_to_state(data)
    except ValidationError as e:
        raise LoadError(f"Invalid workout file format: {path} ({e})") from e


def write_state_file(path: str | Path, state: WorkoutState, saved_at: datetime | None = None) -> Path:
    """
    Write a snapshot document atomically (temp file, then rename).

    Creates parent directories if needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(state_to_dict(state, saved_at), f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return path


class WorkoutStore:
    """
    Manages the autosaved workout snapshot.

    A missing file is an empty workout, not an error.
    """

    def __init__(self, path: str | Path):
        """
        Initialize the store.

        Args:
            path: Path to the autosave JSON file
        """
        self.path = Path(path)

    def exists(self) -> bool:
        """Check if the autosave file exists."""
        return self.path.exists()

    def save(self, state: WorkoutState, saved_at: datetime | None = None) -> Path:
        """
        Overwrite the autosave file with a full snapshot.

        Args:
            state: State to persist
            saved_at: Save instant (defaults to now)

        Returns:
            Path written
        """
        written = write_state_file(self.path, state, saved_at)
        logger.debug(
            "Saved %d exercises, %d blocks to %s",
            len(state.exercises),
            len(state.blocks),
            self.path,
        )
        return written

    def load(self) -> WorkoutState:
        """
        Load the autosaved snapshot.

        Returns:
            Stored state, or an empty state when nothing has been saved yet

        Raises:
            LoadError: If the file exists but cannot be read as a snapshot
        """
        if not self.path.exists():
            return WorkoutState()
        try:
            return read_state_file(self.path)
        except OSError as e:
            raise LoadError(f"Failed to load saved workout: {e}") from e

    def load_or_default(self) -> WorkoutState:
        """
        Load the autosaved snapshot, starting empty if it is unreadable.

        A corrupt file is left in place so it can be inspected; the next
        save overwrites it.
        """
        try:
            return self.load()
        except LoadError as e:
            logger.warning("Failed to load saved workout, starting empty: %s", e)
            return WorkoutState()

    def clear(self) -> None:
        """Delete the autosave file if present."""
        if self.path.exists():
            self.path.unlink()

    def export(self, state: WorkoutState, directory: str | Path, when: datetime | None = None) -> Path:
        """
        Write a timestamped copy of a state.

        Args:
            state: State to export
            directory: Target directory (created if missing)
            when: Export instant (defaults to now); names the file

        Returns:
            Path of the exported file
        """
        when = when or datetime.now(timezone.utc)
        target = Path(directory) / export_filename(when)
        write_state_file(target, state, when)
        logger.info("Exported workout to %s", target)
        return target

    @staticmethod
    def import_file(path: str | Path) -> WorkoutState:
        """
        Read an exported snapshot.

        Raises:
            FileNotFoundError: If the file does not exist
            LoadError: If the file cannot be read or is not a valid snapshot
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Workout file not found: {path}")
        try:
            state = read_state_file(path)
        except OSError as e:
            raise LoadError(f"Failed to import workout: {e}") from e
        logger.info("Imported %d exercises, %d blocks from %s", len(state.exercises), len(state.blocks), path)
        return state
