"""Registry of live base-provider sessions, keyed by token id (jti)"""
import logging
from typing import Optional

from utils.json_store import JsonFile

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, path: str):
        self._file = JsonFile(path)

    def add(self, jti: str, account_id: str, expires_at: int, now: int):
        with self._file.transaction() as data:
            # prune expired sessions
            stale = [k for k, v in data.items() if v["expires_at"] <= now]
            for k in stale:
                del data[k]
            data[jti] = {"account_id": account_id, "expires_at": expires_at}

    def account_for(self, jti: str, now: int) -> Optional[str]:
        with self._file.lock:
            entry = self._file.data.get(jti)
        if not entry or entry["expires_at"] <= now:
            return None
        return entry["account_id"]

    def revoke(self, jti: str) -> bool:
        with self._file.lock:
            if jti not in self._file.data:
                return False
            with self._file.transaction() as data:
                del data[jti]
        logger.info(f"Revoked session {jti}")
        return True
