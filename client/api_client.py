"""HTTP client for the Taskboard auth API"""
import logging
from typing import Any, Dict, Optional, Type

import httpx

from models.account import AccountView
from utils.exceptions import (
    ERRORS_BY_CODE,
    CredentialRejected,
    InvalidOrExpiredCode,
    TaskboardError,
    Unauthenticated,
)

logger = logging.getLogger(__name__)

AUTH_PREFIX = "/api/auth"


class TaskboardClient:
    def __init__(self, base_url: str = "http://localhost:8000", http: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(
        self,
        method: str,
        path: str,
        invalid_input: Type[TaskboardError] = TaskboardError,
        **kwargs,
    ) -> Any:
        try:
            resp = self.http.request(method, AUTH_PREFIX + path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TaskboardError(f"Network error: {e}") from e
        if resp.is_success:
            return resp.json()
        raise self._error_from(resp, invalid_input)

    @staticmethod
    def _error_from(resp: httpx.Response, invalid_input: Type[TaskboardError]) -> TaskboardError:
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        detail = body.get("detail")
        if resp.status_code == 422:
            # request validation failed before reaching a service
            return invalid_input(detail if isinstance(detail, str) else None)
        cls = ERRORS_BY_CODE.get(body.get("error"))
        if cls is CredentialRejected:
            return CredentialRejected(detail, reason=body.get("reason"))
        if cls is not None:
            return cls(detail)
        if resp.status_code == 401:
            return Unauthenticated(detail if isinstance(detail, str) else None)
        return TaskboardError(detail if isinstance(detail, str) else f"HTTP {resp.status_code}")

    # --- base credential provider ---
    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> AccountView:
        data = self._request(
            "POST", "/signup",
            invalid_input=CredentialRejected,
            json={"email": email, "password": password, "name": name},
        )
        self.token = data["access_token"]
        return AccountView(**data["account"])

    def sign_in(self, email: str, password: str) -> AccountView:
        data = self._request(
            "POST", "/token",
            invalid_input=CredentialRejected,
            data={"username": email, "password": password},
        )
        self.token = data["access_token"]
        return AccountView(**data["account"])

    def sign_out(self):
        if self.token is None:
            return
        try:
            self._request("POST", "/signout")
        finally:
            self.token = None

    # --- account ---
    def current_account(self) -> AccountView:
        return AccountView(**self._request("GET", "/me"))

    def update_account(self, otp_enabled: Optional[bool] = None, name: Optional[str] = None) -> AccountView:
        body = {k: v for k, v in {"otp_enabled": otp_enabled, "name": name}.items() if v is not None}
        return AccountView(**self._request("PATCH", "/account", json=body))

    # --- OTP ---
    def issue_otp(self) -> Dict[str, Any]:
        return self._request("POST", "/otp/issue")

    def verify_otp(self, code: str) -> AccountView:
        data = self._request("POST", "/otp/verify", invalid_input=InvalidOrExpiredCode, json={"code": code})
        return AccountView(**data)

    def close(self):
        self.http.close()
