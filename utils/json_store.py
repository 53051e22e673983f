"""Small JSON document file shared by the account and session stores"""
import json
import logging
import os
from contextlib import contextmanager
from threading import RLock
from typing import Any, Dict

logger = logging.getLogger(__name__)


class JsonFile:
    """A dict persisted as one JSON file. Mutate ``data`` only inside ``transaction()``."""

    def __init__(self, path: str):
        self.path = path
        self.lock = RLock()
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self.data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load {self.path}: {e}")
            return {}

    @contextmanager
    def transaction(self):
        """Hold the lock, then save. Any error rolls ``data`` back to its previous contents."""
        with self.lock:
            # records are replaced, never mutated in place, so a shallow copy is enough
            snapshot = dict(self.data)
            try:
                yield self.data
                self.save()
            except Exception:
                self.data = snapshot
                raise

    def save(self):
        # atomic replace
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w") as f:
                json.dump(self.data, f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save {self.path}: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
