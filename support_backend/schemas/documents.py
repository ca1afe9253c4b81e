"""Pydantic models for documentation snippets and completion results."""
from pydantic import BaseModel, ConfigDict


class Document(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    title: str = ""
    content: str = ""


class ScoredDocument(Document):
    similarity: float


class CompletionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    reply: str
    tokens_used: int = 0
