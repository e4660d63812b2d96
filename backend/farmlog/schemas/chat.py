from typing import Literal

from pydantic import Field

from farmlog.schemas.common import CamelModel, UtcDatetime

Sender = Literal["user", "system"]


class ChatMessageCreate(CamelModel):
    text: str = Field(..., min_length=1, max_length=4000)
    sender: Sender = "user"
    crop_id: str | None = None


class ChatMessage(ChatMessageCreate):
    id: str
    timestamp: UtcDatetime


class ChatExchange(CamelModel):
    """A stored user message together with the scripted reply."""
    message: ChatMessage
    reply: ChatMessage


class ChatRequest(CamelModel):
    text: str = Field(..., min_length=1, max_length=4000)
