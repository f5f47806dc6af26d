"""Chat message endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from agenda.core.dependencies import get_conversation_handler, get_credential_provider
from agenda.domains.auth.credentials import SessionCredentialProvider
from agenda.domains.scheduling.conversation import EMPTY_INPUT_REPLY, ConversationHandler
from agenda.domains.scheduling.schemas import MessageRequest, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("", response_model=MessageResponse)
async def post_message(
    payload: MessageRequest,
    handler: ConversationHandler = Depends(get_conversation_handler),
    credentials: SessionCredentialProvider = Depends(get_credential_provider),
):
    """Answer one chat message, scheduling an event when the message asks for one."""
    if not payload.text or not payload.text.strip():
        logger.info("Rejected empty message")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=MessageResponse(reply=EMPTY_INPUT_REPLY).model_dump(),
        )

    reply = await handler.handle(payload.text, credentials)
    return MessageResponse(reply=reply)
