"""Auth Service - base password credential provider and session tokens"""
import logging
import uuid
from typing import Callable, Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext

from models.account import Account, normalize_email, now_ms
from services.account_store import AccountStore
from services.session_store import SessionStore
from utils.config import Settings
from utils.exceptions import AccountNotFound, CredentialRejected, Unauthenticated

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AuthService:
    def __init__(
        self,
        store: AccountStore,
        sessions: SessionStore,
        settings: Settings,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.sessions = sessions
        self.settings = settings
        self.clock = clock

    def hash_password(self, password: str) -> str:
        return pwd_context.hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        try:
            return pwd_context.verify(plain, hashed)
        except (ValueError, TypeError) as e:
            # hash not produced by this context
            logger.warning(f"Password verify error: {e}")
            return False

    # --- sign up / sign in ---
    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> Tuple[Account, str]:
        email_l = normalize_email(email)
        if "@" not in email_l or "." not in email_l.split("@")[-1]:
            raise CredentialRejected("Invalid email format", reason=CredentialRejected.INVALID_EMAIL)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise CredentialRejected(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                reason=CredentialRejected.WEAK_PASSWORD,
            )
        account = Account(
            email=email_l,
            name=name.strip() if isinstance(name, str) and name.strip() else None,
            password_hash=self.hash_password(password),
            created_at=self.clock(),
        )
        account = self.store.create(account)
        return account, self.create_session(account.id)

    def sign_in(self, email: str, password: str) -> Tuple[Account, str]:
        account = self.store.get_by_email(email)
        if not account or not self.verify_password(password, account.password_hash):
            logger.info("Rejected sign-in attempt")
            raise CredentialRejected("Invalid credentials", reason=CredentialRejected.INVALID_CREDENTIALS)
        account = self.store.patch(account.id, {"last_login": self.clock()})
        return account, self.create_session(account.id)

    # --- sessions ---
    def create_session(self, account_id: str) -> str:
        now = self.clock()
        expires_at = now + self.settings.access_token_expire_minutes * 60 * 1000
        jti = uuid.uuid4().hex
        self.sessions.add(jti, account_id, expires_at, now)
        claims = {"sub": account_id, "jti": jti, "exp": expires_at // 1000}
        return jwt.encode(claims, self.settings.auth_secret, algorithm=self.settings.token_algorithm)

    def _decode(self, token: Optional[str]) -> dict:
        if not token:
            raise Unauthenticated()
        try:
            # expiry is enforced by the session registry against self.clock
            payload = jwt.decode(
                token,
                self.settings.auth_secret,
                algorithms=[self.settings.token_algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            raise Unauthenticated("Could not validate credentials")
        if not payload.get("sub") or not payload.get("jti"):
            raise Unauthenticated("Could not validate credentials")
        return payload

    def resolve_account_id(self, token: Optional[str]) -> str:
        payload = self._decode(token)
        account_id = self.sessions.account_for(payload["jti"], self.clock())
        if account_id is None or account_id != payload["sub"]:
            raise Unauthenticated("Session expired or signed out")
        return account_id

    def resolve_account(self, token: Optional[str]) -> Account:
        return self.get_account(self.resolve_account_id(token))

    def get_account(self, account_id: str) -> Account:
        account = self.store.get(account_id)
        if account is None:
            raise AccountNotFound()
        return account

    def sign_out(self, token: Optional[str]) -> bool:
        try:
            payload = self._decode(token)
        except Unauthenticated:
            return False
        return self.sessions.revoke(payload["jti"])

    # --- account settings ---
    def update_account(
        self,
        account_id: str,
        otp_enabled: Optional[bool] = None,
        name: Optional[str] = None,
    ) -> Account:
        updates = {}
        if name is not None:
            updates["name"] = name
        if otp_enabled is not None:
            updates["otp_enabled"] = otp_enabled
        if not updates:
            return self.get_account(account_id)
        return self.store.patch(account_id, updates)
