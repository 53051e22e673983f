"""Authentication routes: password sign-up/sign-in gated by email OTP"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, Field

from models.account import Account, AccountView
from routes.deps import Services, get_current_account, get_services, oauth2_scheme

router = APIRouter()


class SignUpRequest(BaseModel):
    email: str
    password: str
    name: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    code: str = Field(min_length=6, max_length=6, pattern=r"^[0-9]{6}$")


class UpdateAccountRequest(BaseModel):
    otp_enabled: Optional[bool] = None
    name: Optional[str] = None


class SessionResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: AccountView


@router.post("/signup", response_model=SessionResponse)
async def signup(body: SignUpRequest, services: Services = Depends(get_services)):
    account, token = services.auth.sign_up(body.email, body.password, body.name)
    return SessionResponse(access_token=token, account=account.public())


@router.post("/token", response_model=SessionResponse)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), services: Services = Depends(get_services)):
    account, token = services.auth.sign_in(form_data.username, form_data.password)
    return SessionResponse(access_token=token, account=account.public())


@router.post("/signout")
async def signout(token: Optional[str] = Depends(oauth2_scheme), services: Services = Depends(get_services)):
    revoked = services.auth.sign_out(token)
    return {"success": True, "revoked": revoked}


@router.get("/me", response_model=AccountView)
async def me(current: Account = Depends(get_current_account)):
    return current.public()


@router.patch("/account", response_model=AccountView)
async def update_account(
    body: UpdateAccountRequest,
    current: Account = Depends(get_current_account),
    services: Services = Depends(get_services),
):
    updated = services.auth.update_account(current.id, otp_enabled=body.otp_enabled, name=body.name)
    return updated.public()


@router.post("/otp/issue", status_code=202)
async def issue_otp(
    background: BackgroundTasks,
    current: Account = Depends(get_current_account),
    services: Services = Depends(get_services),
):
    # the email goes out after the response is sent
    services.otp.issue(current.id, schedule=background.add_task)
    return {
        "success": True,
        "sent": services.email.enabled,
        "expires_in_minutes": services.settings.otp_ttl_minutes,
    }


@router.post("/otp/verify", response_model=AccountView)
async def verify_otp(
    body: VerifyOtpRequest,
    current: Account = Depends(get_current_account),
    services: Services = Depends(get_services),
):
    services.otp.verify(current.id, body.code)
    return services.auth.get_account(current.id).public()


@router.get("/email/status")
async def email_status(current: Account = Depends(get_current_account), services: Services = Depends(get_services)):
    """Check SMTP configuration & connectivity."""
    return {"enabled": services.email.enabled, "connection": services.email.test_connection()}
