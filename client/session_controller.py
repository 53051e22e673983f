"""Client-side session state machine for OTP-gated sign-in and sign-up.

States move unauthenticated -> provisional -> challenged -> verified. The
OTP decision runs once per login, right after the credential step returns,
against a fresh read of the account. Nothing here reacts to account changes
on its own.
"""
import logging
from enum import Enum
from typing import Callable, Optional

from client.api_client import TaskboardClient
from models.account import OTP_LENGTH, AccountView, is_valid_code_format, requires_otp
from utils.exceptions import (
    CredentialRejected,
    InvalidOrExpiredCode,
    SessionStateError,
    TaskboardError,
    Unauthenticated,
)

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "This email is already registered. Please sign in instead."
INVALID_CODE_MESSAGE = "Invalid or expired OTP. Please try again."
SEND_FAILED_MESSAGE = "Failed to send verification code."

_DUPLICATE_PHRASES = ("already in use", "already exists")


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PROVISIONAL = "provisional"
    CHALLENGED = "challenged"
    VERIFIED = "verified"


class Flow(str, Enum):
    SIGN_IN = "sign_in"
    SIGN_UP = "sign_up"


def friendly_error(exc: Exception) -> str:
    """Rewrite duplicate-registration errors; everything else is shown verbatim."""
    if isinstance(exc, CredentialRejected) and exc.reason == CredentialRejected.DUPLICATE_EMAIL:
        return DUPLICATE_EMAIL_MESSAGE
    message = str(exc) or "Authentication failed"
    if isinstance(exc, CredentialRejected) and exc.reason is None:
        # no reason code from the server, fall back to the message text
        lowered = message.lower()
        if any(phrase in lowered for phrase in _DUPLICATE_PHRASES):
            return DUPLICATE_EMAIL_MESSAGE
    return message


class AuthSessionController:
    def __init__(self, client: TaskboardClient, on_verified: Optional[Callable[[AccountView], None]] = None):
        self.client = client
        self.on_verified = on_verified
        self.state = SessionState.UNAUTHENTICATED
        self.account: Optional[AccountView] = None
        self.error: Optional[str] = None
        self.notice: Optional[str] = None

    # --- credential step ---
    def submit_credentials(
        self,
        email: str,
        password: str,
        flow: Flow = Flow.SIGN_IN,
        name: Optional[str] = None,
    ) -> SessionState:
        if self.state != SessionState.UNAUTHENTICATED:
            raise SessionStateError(f"Cannot submit credentials while {self.state.value}")
        self.error = None
        self.notice = None
        try:
            if flow == Flow.SIGN_UP:
                self.client.sign_up(email, password, name)
            else:
                self.client.sign_in(email, password)
        except TaskboardError as e:
            logger.info(f"Credential step failed: {e}")
            self.error = friendly_error(e)
            return self.state

        self.state = SessionState.PROVISIONAL
        return self._continue_after_login(force_challenge=flow == Flow.SIGN_UP)

    def _continue_after_login(self, force_challenge: bool) -> SessionState:
        try:
            # never trust cached verification fields for the gate
            self.account = self.client.current_account()
        except TaskboardError as e:
            self.error = friendly_error(e)
            self._teardown()
            return self.state

        if force_challenge or requires_otp(self.account):
            try:
                self.client.issue_otp()
            except TaskboardError as e:
                logger.error(f"Failed to issue OTP: {e}")
                self._teardown()
                self.error = SEND_FAILED_MESSAGE
                return self.state
            self.state = SessionState.CHALLENGED
            self.notice = "Please check your email for the verification code."
            return self.state

        self.notice = "Welcome back!"
        return self._finalize(self.account)

    # --- code step ---
    def submit_code(self, code: str) -> SessionState:
        self._require(SessionState.CHALLENGED)
        self.error = None
        code = (code or "").strip()
        if not is_valid_code_format(code):
            self.error = f"Enter the {OTP_LENGTH}-digit code sent to your email."
            return self.state
        try:
            account = self.client.verify_otp(code)
        except InvalidOrExpiredCode:
            self.error = INVALID_CODE_MESSAGE
            return self.state
        except Unauthenticated as e:
            self.error = friendly_error(e)
            self._teardown()
            return self.state
        except TaskboardError as e:
            self.error = friendly_error(e)
            return self.state
        self.notice = "Verified successfully!"
        return self._finalize(account)

    def resend_code(self) -> SessionState:
        """Issue a new code; the previous one stops working."""
        self._require(SessionState.CHALLENGED)
        self.error = None
        try:
            self.client.issue_otp()
        except Unauthenticated as e:
            self.error = friendly_error(e)
            self._teardown()
            return self.state
        except TaskboardError as e:
            logger.error(f"Failed to resend OTP: {e}")
            self.error = SEND_FAILED_MESSAGE
            return self.state
        self.notice = "A new code has been sent."
        return self.state

    # --- leaving ---
    def abandon(self) -> SessionState:
        """User closed the dialog or went back to sign-in before finishing."""
        if self.state in (SessionState.PROVISIONAL, SessionState.CHALLENGED):
            # any unfinished challenge reverts, even if verified_at was set by an earlier cycle
            self._teardown()
        self.error = None
        return self.state

    def sign_out(self) -> SessionState:
        self._teardown()
        self.error = None
        self.notice = None
        return self.state

    # --- internals ---
    def _require(self, state: SessionState):
        if self.state != state:
            raise SessionStateError(f"Expected {state.value} session, current state is {self.state.value}")

    def _finalize(self, account: AccountView) -> SessionState:
        self.account = account
        self.state = SessionState.VERIFIED
        if self.on_verified:
            self.on_verified(account)
        return self.state

    def _teardown(self):
        try:
            self.client.sign_out()
        except TaskboardError as e:
            # the client has already dropped the token
            logger.warning(f"Sign-out request failed: {e}")
        self.account = None
        self.state = SessionState.UNAUTHENTICATED
