"""Account record owned by the credential store"""
import time
import uuid
from typing import Optional

from pydantic import BaseModel, Field


OTP_LENGTH = 6


def now_ms() -> int:
    return int(time.time() * 1000)


class AccountView(BaseModel):
    """Account fields returned to clients (no password hash, no OTP secret)."""
    id: str
    email: str
    name: Optional[str] = None
    created_at: int
    verified_at: Optional[int] = None
    otp_enabled: bool = True
    last_login: Optional[int] = None


class Account(AccountView):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    created_at: int = Field(default_factory=now_ms)
    password_hash: str
    # otp_secret and otp_expires_at are set and cleared together
    otp_secret: Optional[str] = None
    otp_expires_at: Optional[int] = None

    def public(self) -> AccountView:
        return AccountView(**self.model_dump(include=set(AccountView.model_fields)))

    @property
    def has_pending_challenge(self) -> bool:
        return self.otp_secret is not None and self.otp_expires_at is not None


def requires_otp(account: AccountView) -> bool:
    """OTP is required until the first verification, and on every login while enabled."""
    return account.verified_at is None or account.otp_enabled


def is_valid_code_format(code: Optional[str]) -> bool:
    """Exactly six ASCII digits."""
    return isinstance(code, str) and len(code) == OTP_LENGTH and code.isascii() and code.isdigit()


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()
