"""Shared service wiring and FastAPI dependencies"""
from functools import lru_cache
from typing import Callable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from models.account import Account, now_ms
from services.account_store import AccountStore
from services.ai_service import AIService
from services.auth_service import AuthService
from services.email_service import EmailService
from services.otp_service import OTPService
from services.session_store import SessionStore
from utils.config import Settings, get_settings

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


class Services:
    def __init__(self, settings: Settings, clock: Callable[[], int] = now_ms, email_service=None, ai_service=None):
        self.settings = settings
        self.store = AccountStore(settings.accounts_file)
        self.sessions = SessionStore(settings.sessions_file)
        self.email = email_service or EmailService(settings)
        self.ai = ai_service or AIService(settings)
        self.auth = AuthService(self.store, self.sessions, settings, clock=clock)
        self.otp = OTPService(self.store, self.email, clock=clock, ttl_minutes=settings.otp_ttl_minutes)


@lru_cache()
def get_services() -> Services:
    return Services(get_settings())


def get_current_account(
    token: str = Depends(oauth2_scheme),
    services: Services = Depends(get_services),
) -> Account:
    # Unauthenticated / AccountNotFound are rendered by the app exception handler
    return services.auth.resolve_account(token)
