from datetime import datetime
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

TEMP_ID_PREFIX = "temp-"


class UserMessage(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    message_type: Literal["user"] = "user"
    content: str
    created_at: datetime


class AssistantMessage(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    message_type: Literal["assistant"] = "assistant"
    content: str
    source_document_name: Optional[str] = None
    source_document_url: Optional[str] = None
    source_document_type: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    created_at: datetime


ChatMessage = Annotated[Union[UserMessage, AssistantMessage], Field(discriminator="message_type")]


def is_optimistic(message: Union[UserMessage, AssistantMessage]) -> bool:
    """True for locally created messages the server has not confirmed yet."""
    return message.id.startswith(TEMP_ID_PREFIX)


class ChatSession(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    session_title: Optional[str] = None
    started_at: datetime
    last_activity: datetime
    is_active: bool = True
    message_count: Optional[int] = None
    messages: List[ChatMessage] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("messages", mode="before")
    @classmethod
    def _null_messages(cls, value):
        return [] if value is None else value


class ChatQuery(BaseModel):
    query: str = Field(min_length=1)
    session_id: Optional[str] = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    session_id: str
    user_message_id: str
    assistant_message_id: str
    answer: str
    source_document_name: Optional[str] = None
    source_document_url: Optional[str] = None
    source_document_type: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    timestamp: datetime

    def to_messages(self, query: str) -> Tuple[UserMessage, AssistantMessage]:
        """Authoritative (user echo, assistant reply) pair for this exchange."""
        user = UserMessage(id=self.user_message_id, content=query, created_at=self.timestamp)
        assistant = AssistantMessage(
            id=self.assistant_message_id,
            content=self.answer,
            source_document_name=self.source_document_name or None,
            source_document_url=self.source_document_url or None,
            source_document_type=self.source_document_type or None,
            confidence=self.confidence,
            created_at=self.timestamp,
        )
        return user, assistant


class SessionUpdate(BaseModel):
    session_title: Optional[str] = None
    is_active: Optional[bool] = None
