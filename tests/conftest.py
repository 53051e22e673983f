"""Shared fixtures: isolated data dir, controllable clock, capturing mailer."""
import pytest
from fastapi.testclient import TestClient

from main import app
from routes.deps import Services, get_services
from utils.config import Settings

START_MS = 1_760_000_000_000
MINUTE_MS = 60 * 1000


class FakeClock:
    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, minutes: float = 0, ms: int = 0):
        self.now += int(minutes * MINUTE_MS) + ms


class CapturingMailer:
    enabled = False

    def __init__(self):
        self.sent = []

    def send_otp_email(self, to_email: str, otp: str) -> bool:
        self.sent.append((to_email, otp))
        return True

    def test_connection(self):
        return "SMTP not fully configured"

    @property
    def last_code(self):
        return self.sent[-1][1] if self.sent else None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mailer():
    return CapturingMailer()


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=str(tmp_path), auth_secret="test-secret", ai_api_key=None)


@pytest.fixture
def services(settings, clock, mailer):
    return Services(settings, clock=clock, email_service=mailer)


@pytest.fixture
def client(services):
    app.dependency_overrides[get_services] = lambda: services
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def signup(client, email="a@b.com", password="longenough1", name="Ada"):
    resp = client.post("/api/auth/signup", json={"email": email, "password": password, "name": name})
    assert resp.status_code == 200, resp.text
    return resp.json()
