"""AI text-assist routes for drafting and improving task descriptions"""
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from models.account import Account
from routes.deps import Services, get_current_account, get_services

router = APIRouter()


class ChatRequest(BaseModel):
    prompt: str = Field(min_length=1)
    as_json: bool = False
    system_prompt: Optional[str] = None


class ChatResponse(BaseModel):
    result: Any


@router.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    current: Account = Depends(get_current_account),
    services: Services = Depends(get_services),
):
    return ChatResponse(result=services.ai.chat(body.prompt, as_json=body.as_json, system_prompt=body.system_prompt))
