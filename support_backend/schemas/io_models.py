"""Pydantic models for API I/O.

JSON bodies use camelCase keys (``sessionId``, ``tokensUsed``, ``messageCount``);
the Python side uses snake_case attributes.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _non_empty(value: str, name: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{name} is required and must be a non-empty string")
    return value


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    message: str

    @field_validator("session_id")
    @classmethod
    def _check_session_id(cls, v: str) -> str:
        return _non_empty(v, "sessionId")

    @field_validator("message")
    @classmethod
    def _check_message(cls, v: str) -> str:
        return _non_empty(v, "message")


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    reply: str
    tokens_used: int = Field(0, alias="tokensUsed")
    timestamp: str


class MessageOut(BaseModel):
    id: int
    session_id: str
    role: str
    content: str
    created_at: datetime


class MessagesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    session_id: str = Field(alias="sessionId")
    messages: List[MessageOut]
    total: int


class SessionCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(None, alias="sessionId")

    @field_validator("session_id")
    @classmethod
    def _check_session_id(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if not v.strip():
            raise ValueError("sessionId must be a non-empty string")
        return v


class SessionInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_at: datetime
    updated_at: datetime
    message_count: int = Field(0, alias="messageCount")


class SessionListResponse(BaseModel):
    success: bool = True
    sessions: List[SessionInfo]
    total: int


class SessionResponse(BaseModel):
    success: bool = True
    session: SessionInfo
