"""Chat routes: the stored conversation and the scripted responder."""

from fastapi import APIRouter, Depends, status

from farmlog.deps import get_store
from farmlog.schemas.chat import ChatExchange, ChatMessage, ChatRequest
from farmlog.schemas.common import DeleteResult
from farmlog.services.chat import generate_reply
from farmlog.store.kinds import EntityKind
from farmlog.store.service import FarmStore

router = APIRouter()


@router.get("/", response_model=list[ChatMessage])
async def list_messages(store: FarmStore = Depends(get_store)):
    """Conversation oldest first."""
    return store.query(EntityKind.CHAT_MESSAGE)


@router.post("/", response_model=ChatExchange, status_code=status.HTTP_201_CREATED)
async def post_message(body: ChatRequest, store: FarmStore = Depends(get_store)):
    """Store the user's message, then the generated reply."""
    message = await store.add_message(body.text.strip(), "user")
    text, crop_id = generate_reply(message.text, store.crops)
    reply = await store.add_message(text, "system", crop_id)
    return ChatExchange(message=message, reply=reply)


@router.delete("/", response_model=DeleteResult)
async def clear_messages(store: FarmStore = Depends(get_store)):
    removed = await store.clear_messages()
    return DeleteResult(deleted=removed > 0, cascaded=removed)


@router.delete("/{message_id}", response_model=DeleteResult)
async def delete_message(message_id: str, store: FarmStore = Depends(get_store)):
    existed, _ = await store.delete(EntityKind.CHAT_MESSAGE, message_id)
    return DeleteResult(deleted=existed)
