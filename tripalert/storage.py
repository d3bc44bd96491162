from __future__ import annotations

import logging
import os
import pathlib
import tempfile
from typing import List, Sequence

from pydantic import TypeAdapter, ValidationError

from .models import Trip

# Default path – relative to the repository root
REPO_DIR = pathlib.Path(__file__).resolve().parent.parent
STORAGE_FILE = os.getenv(
    "TRIPALERT_STORAGE", str(REPO_DIR / "data" / "best_trips.json")
)

logger = logging.getLogger(__name__)

_TRIPS = TypeAdapter(List[Trip])


class StorageError(RuntimeError):
    """The best-trip file could not be read or written."""


class JsonTripStore:
    """Keeps the current best trips in a single JSON file.

    ``save`` replaces the whole file: data is written to a temporary file in
    the same directory and moved over the target with ``os.replace``.
    """

    def __init__(self, path: str | os.PathLike[str] = STORAGE_FILE) -> None:
        self.path = pathlib.Path(path)

    def load(self) -> List[Trip]:
        """Return the stored trips, ``[]`` if nothing was saved yet."""
        if not self.path.exists():
            logger.info("No stored trips at %s", self.path)
            return []
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc
        if not raw.strip():
            return []
        try:
            trips = _TRIPS.validate_json(raw)
        except ValidationError as exc:
            raise StorageError(f"Corrupt trip file {self.path}: {exc}") from exc
        logger.info("Loaded %d stored trips from %s", len(trips), self.path)
        return trips

    def save(self, trips: Sequence[Trip]) -> None:
        """Replace the stored trips with *trips*."""
        logger.info("Saving %d trips to %s", len(trips), self.path)
        data = _TRIPS.dump_json(list(trips), indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc


__all__ = ["JsonTripStore", "STORAGE_FILE", "StorageError"]
