"""Environment-driven settings.

Env vars:
  AUTH_SECRET, ACCESS_TOKEN_EXPIRE_MINUTES, DATA_DIR, OTP_TTL_MINUTES,
  SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_FROM,
  PPLX_API_KEY, PPLX_BASE_URL, PPLX_MODEL, CORS_ORIGINS, LOG_LEVEL
"""
import os
from typing import List, Optional


class Settings:
    def __init__(self, **overrides):
        self.auth_secret: str = os.getenv("AUTH_SECRET", "dev-insecure-secret-change-me")
        self.token_algorithm: str = "HS256"
        self.access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60") or 60)
        self.data_dir: str = os.getenv("DATA_DIR", "data")
        self.otp_ttl_minutes: int = int(os.getenv("OTP_TTL_MINUTES", "15") or 15)

        self.smtp_host: Optional[str] = os.getenv("SMTP_HOST")
        self.smtp_port: int = int(os.getenv("SMTP_PORT", "0") or 0)
        self.smtp_user: Optional[str] = os.getenv("SMTP_USER")
        self.smtp_password: Optional[str] = os.getenv("SMTP_PASS")
        self.smtp_from: str = os.getenv("SMTP_FROM", self.smtp_user or "noreply@example.com")

        self.ai_api_key: Optional[str] = os.getenv("PPLX_API_KEY")
        self.ai_base_url: str = os.getenv("PPLX_BASE_URL", "https://api.perplexity.ai")
        self.ai_model: str = os.getenv("PPLX_MODEL", "sonar-pro")

        self.cors_origins: List[str] = [
            o.strip()
            for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
            if o.strip()
        ]
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

    @property
    def accounts_file(self) -> str:
        return os.path.join(self.data_dir, "accounts.json")

    @property
    def sessions_file(self) -> str:
        return os.path.join(self.data_dir, "sessions.json")


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
