from fastapi import APIRouter
from pydantic import BaseModel

from line_kpi.errors import ValidationError


router = APIRouter(tags=["chat"])


class ChatRequest(BaseModel):
    message: str | None = None


class ChatReply(BaseModel):
    reply: str


@router.post("/chat")
async def chat(payload: ChatRequest | None = None) -> ChatReply:
    """Echo the message back."""
    if payload is None or not payload.message:
        raise ValidationError("Message is required", code="MISSING_MESSAGE")
    return ChatReply(reply=f"You sent: {payload.message}")
