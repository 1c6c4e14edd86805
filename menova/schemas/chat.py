# menova/schemas/chat.py
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class StartChatIn(BaseModel):
    title: Optional[str] = None
    source: Literal["chat", "voice"] = "chat"


class SendIn(BaseModel):
    conversation_id: str
    message: str = Field(..., max_length=5000)


class TranscriptTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class TranscriptIn(BaseModel):
    source: Literal["chat", "voice"] = "voice"
    messages: List[TranscriptTurn] = Field(..., min_length=1)


class MessageOut(BaseModel):
    id: str
    role: str
    content: str


class ConversationOut(BaseModel):
    conversation_id: str
    title: Optional[str] = None
    summary: Optional[str] = None
    detected_symptoms: List[str] = []
    intensity: Optional[int] = None
