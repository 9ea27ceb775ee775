"""
Data Models for the Chat Archive

Defines:
1. MessageRole - Speaker of a chat message
2. ChatMessage - One message of a conversation
3. ChatTranscript - The full ordered message history of one conversation
4. ChatInfo - Summary entry kept in each character's index
5. ChatRecord - Persisted shape of one transcript (info block + messages)

Design Principles:
- Pydantic v2 for validation and serialization
- Transcripts are saved wholesale; there is no per-message append
- Timestamps of the archive itself are timezone-aware UTC datetimes;
  message timestamps are opaque strings supplied by the chat client
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class MessageRole(str, Enum):
    """Speaker of a chat message. Unknown roles map to OTHER."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    OTHER = "other"


class ChatMessage(BaseModel):
    """A single chat message."""
    role: MessageRole = Field(
        MessageRole.USER,
        description="Who wrote the message",
    )
    content: str = Field(
        ...,
        description="Message text",
    )
    timestamp: Optional[str] = Field(
        None,
        description="Client-side message time, if known",
        # Browser extensions send this as "time"
        validation_alias=AliasChoices("timestamp", "time"),
    )

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: Any) -> Any:
        if isinstance(value, MessageRole):
            return value
        try:
            return MessageRole(str(value).lower())
        except ValueError:
            return MessageRole.OTHER


class ChatTranscript(BaseModel):
    """
    The full message history of one conversation.

    Callers submit the complete current state on every save.
    """
    id: str = Field(
        "",
        description="Chat id, unique per character",
    )
    title: str = Field(
        "",
        description="Human-readable chat title",
    )
    messages: list[ChatMessage] = Field(
        default_factory=list,
        description="Messages in chronological order",
    )

    def recent(self, n: int) -> "ChatTranscript":
        """Return a copy holding only the last n messages (n <= 0 keeps all)."""
        if n <= 0 or len(self.messages) <= n:
            return self
        return ChatTranscript(id=self.id, title=self.title, messages=self.messages[-n:])


class ChatInfo(BaseModel):
    """Summary of one archived transcript, as listed in the character index."""
    id: str
    title: str
    character: str
    created_at: datetime
    updated_at: datetime
    message_count: int = Field(0, ge=0)


class ChatRecord(BaseModel):
    """Persisted form of a transcript: info block plus ordered messages."""
    info: ChatInfo
    messages: list[ChatMessage] = Field(default_factory=list)

    def to_transcript(self) -> ChatTranscript:
        return ChatTranscript(
            id=self.info.id,
            title=self.info.title,
            messages=self.messages,
        )
