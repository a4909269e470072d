from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, Literal
from pydantic import BaseModel, ConfigDict, Field


SELF_ROLES = {"user", "self", "me", "you"}


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    LATE_NIGHT = "late_night"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class ChatMessage(BaseModel):
    role: str = "match"
    content: Optional[str] = None
    timestamp: Optional[datetime] = None


class ConversationContext(BaseModel):
    """Structured messages when the OCR parser produced them, raw OCR text otherwise."""

    model_config = ConfigDict(frozen=True)

    messages: Optional[List[ChatMessage]] = None
    raw_text: Optional[str] = None


class StylePreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    humor: int = Field(default=50, ge=0, le=100)
    subtlety: int = Field(default=50, ge=0, le=100)
    boldness: int = Field(default=50, ge=0, le=100)
    length: Literal["short", "medium", "long"] = "medium"


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    conversation: ConversationContext
    preferences: StylePreferences
    platform: str
    coach_mode: bool = False
    time_of_day: TimeOfDay
    region: str = "America/Sao_Paulo"


class StyleSnapshot(BaseModel):
    humor: int
    subtlety: int
    boldness: int
    length: str
    platform: str
    time_of_day: TimeOfDay


class CulturalContext(BaseModel):
    time_awareness: bool = True
    platform_appropriate: bool = True
    brazilian_tone: bool = True
    region: str


class Suggestion(BaseModel):
    text: str
    style: StyleSnapshot
    reasoning: List[str] = Field(default_factory=list)
    alternatives: List[str] = Field(default_factory=list, max_length=2)
    cultural_context: CulturalContext
    timing_appropriate: bool = True


class SuggestionRecord(Suggestion):
    id: str
    conversation_id: str
    created_at: datetime
    accepted: Optional[bool] = None
    copied_at: Optional[datetime] = None
    feedback_score: Optional[int] = Field(default=None, ge=1, le=5)


class Profile(BaseModel):
    user_id: str
    timezone: str = "America/Sao_Paulo"
    preferences: StylePreferences = Field(default_factory=StylePreferences)


class ProfileUpsertRequest(BaseModel):
    timezone: str = "America/Sao_Paulo"
    preferences: StylePreferences = Field(default_factory=StylePreferences)


class ConversationCreateRequest(BaseModel):
    user_id: str
    platform: str
    title: Optional[str] = None
    ocr_text: Optional[str] = None
    parsed_messages: Optional[List[ChatMessage]] = None


class ConversationRecord(ConversationCreateRequest):
    id: str
    created_at: datetime

    def to_context(self) -> ConversationContext:
        return ConversationContext(messages=self.parsed_messages, raw_text=self.ocr_text)


class SuggestRequest(BaseModel):
    conversation_id: Optional[str] = None
    preferences: Optional[StylePreferences] = None
    coach_mode: bool = False
    llm_options: Optional[Dict[str, float | int]] = None  # e.g., {"temperature": 0.9, "seed": 7}


class SuggestResponse(BaseModel):
    conversation_id: str
    coach_mode: bool
    anti_generic_check: bool = True
    suggestions: List[SuggestionRecord]


class FeedbackRequest(BaseModel):
    score: int = Field(ge=1, le=5)


class ErrorResponse(BaseModel):
    error: str
    message: str
    detail: str
    retryable: bool


class HealthResponse(BaseModel):
    status: str = "ok"
