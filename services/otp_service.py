"""OTP Service - issues and verifies email one-time passcodes stored on the account"""
import hmac
import logging
import secrets
import threading
from typing import Callable, Optional

from models.account import Account, is_valid_code_format, now_ms
from services.account_store import AccountStore
from services.email_service import EmailService
from utils.exceptions import AccountNotFound, InvalidOrExpiredCode, Unauthenticated

logger = logging.getLogger(__name__)

OTP_TTL_MINUTES = 15

# schedule(func, *args): run func later without waiting for it
Scheduler = Callable[..., None]


def run_in_thread(func, *args):
    threading.Thread(target=func, args=args, daemon=True).start()


def generate_code() -> str:
    """Uniform over 100000-999999, so always six digits."""
    return str(100000 + secrets.randbelow(900000))


class OTPService:
    def __init__(
        self,
        store: AccountStore,
        email_service: EmailService,
        clock: Callable[[], int] = now_ms,
        ttl_minutes: int = OTP_TTL_MINUTES,
    ):
        self.store = store
        self.email_service = email_service
        self.clock = clock
        self.ttl_ms = ttl_minutes * 60 * 1000

    def issue(self, account_id: Optional[str], schedule: Scheduler = run_in_thread) -> None:
        """Store a fresh code (replacing any outstanding one) and schedule its email."""
        if not account_id:
            raise Unauthenticated()
        account = self.store.get(account_id)
        if account is None or not account.email:
            raise AccountNotFound()

        code = generate_code()
        expires_at = self.clock() + self.ttl_ms
        self.store.patch(account_id, {"otp_secret": code, "otp_expires_at": expires_at})
        logger.info(f"Issued OTP for account {account_id}, expires at {expires_at}")

        schedule(self.email_service.send_otp_email, account.email, code)

    def verify(self, account_id: Optional[str], code: str) -> None:
        """Consume the outstanding code. A wrong or expired code leaves the account untouched."""
        if not account_id:
            raise Unauthenticated()
        now = self.clock()
        submitted = code if is_valid_code_format(code) else None

        def matches(account: Account) -> bool:
            return (
                submitted is not None
                and account.has_pending_challenge
                and account.otp_expires_at > now
                and hmac.compare_digest(account.otp_secret.encode(), submitted.encode())
            )

        # compare and clear under one store lock
        verified = self.store.patch_if(
            account_id,
            matches,
            {"verified_at": now, "otp_secret": None, "otp_expires_at": None},
        )
        if verified is None:
            logger.info(f"OTP verification failed for account {account_id}")
            raise InvalidOrExpiredCode()
        logger.info(f"Account {account_id} verified")
