"""Account Store - JSON-file backed credential store (get / patch / create)"""
import logging
from typing import Any, Callable, Dict, Optional

from models.account import Account, normalize_email
from utils.exceptions import AccountNotFound, CredentialRejected
from utils.json_store import JsonFile

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = {
    "name",
    "verified_at",
    "otp_enabled",
    "otp_secret",
    "otp_expires_at",
    "last_login",
}


class AccountStore:
    def __init__(self, path: str):
        self._file = JsonFile(path)

    def get(self, account_id: str) -> Optional[Account]:
        with self._file.lock:
            raw = self._file.data.get(account_id)
            return Account(**raw) if raw else None

    def get_by_email(self, email: str) -> Optional[Account]:
        email_l = normalize_email(email)
        with self._file.lock:
            for raw in self._file.data.values():
                if raw.get("email") == email_l:
                    return Account(**raw)
        return None

    def create(self, account: Account) -> Account:
        account.email = normalize_email(account.email)
        with self._file.transaction() as data:
            if any(raw.get("email") == account.email for raw in data.values()):
                raise CredentialRejected(
                    "An account with this email already exists",
                    reason=CredentialRejected.DUPLICATE_EMAIL,
                )
            data[account.id] = account.model_dump()
        logger.info(f"Created account {account.id}")
        return account

    def patch(self, account_id: str, fields: Dict[str, Any]) -> Account:
        """Apply a partial update in one write. A ``None`` value clears the field."""
        return self.patch_if(account_id, lambda account: True, fields)

    def patch_if(
        self,
        account_id: str,
        condition: Callable[[Account], bool],
        fields: Dict[str, Any],
    ) -> Optional[Account]:
        """Check ``condition`` against the stored record and patch it under one lock.

        Returns None, leaving the record untouched, when the condition is false.
        """
        unknown = set(fields) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not patchable: {sorted(unknown)}")
        with self._file.lock:
            raw = self._file.data.get(account_id)
            if raw is None:
                raise AccountNotFound()
            if not condition(Account(**raw)):
                return None
            updated = Account(**{**raw, **fields})
            if (updated.otp_secret is None) != (updated.otp_expires_at is None):
                raise ValueError("otp_secret and otp_expires_at must be set or cleared together")
            with self._file.transaction() as data:
                data[account_id] = updated.model_dump()
            return updated
