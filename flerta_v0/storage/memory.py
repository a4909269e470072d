from __future__ import annotations
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..models.schemas import (
    ConversationCreateRequest,
    ConversationRecord,
    Profile,
    Suggestion,
    SuggestionRecord,
)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


class MemoryStore:
    def __init__(self):
        # user_id -> Profile
        self.profiles: Dict[str, Profile] = {}
        # conversation_id -> ConversationRecord
        self.conversations: Dict[str, ConversationRecord] = {}
        # suggestion_id -> SuggestionRecord
        self.suggestions: Dict[str, SuggestionRecord] = {}

    def set_profile(self, profile: Profile) -> None:
        self.profiles[profile.user_id] = profile

    def get_profile(self, user_id: str) -> Optional[Profile]:
        return self.profiles.get(user_id)

    def add_conversation(self, data: ConversationCreateRequest) -> ConversationRecord:
        rec = ConversationRecord(id=str(uuid.uuid4()), created_at=_now(), **data.model_dump())
        self.conversations[rec.id] = rec
        return rec

    def get_conversation(self, conversation_id: str) -> Optional[ConversationRecord]:
        return self.conversations.get(conversation_id)

    def add_suggestions(self, conversation_id: str, items: List[Suggestion]) -> List[SuggestionRecord]:
        created = _now()
        saved: List[SuggestionRecord] = []
        for s in items:
            rec = SuggestionRecord(id=str(uuid.uuid4()), conversation_id=conversation_id, created_at=created, **s.model_dump())
            self.suggestions[rec.id] = rec
            saved.append(rec)
        return saved

    def get_suggestion(self, suggestion_id: str) -> Optional[SuggestionRecord]:
        return self.suggestions.get(suggestion_id)

    def list_suggestions(self, conversation_id: str) -> List[SuggestionRecord]:
        items = [s for s in self.suggestions.values() if s.conversation_id == conversation_id]
        return sorted(items, key=lambda s: s.created_at, reverse=True)

    def mark_copied(self, suggestion_id: str) -> Optional[SuggestionRecord]:
        rec = self.suggestions.get(suggestion_id)
        if rec is None:
            return None
        rec = rec.model_copy(update={"accepted": True, "copied_at": _now()})
        self.suggestions[suggestion_id] = rec
        return rec

    def set_feedback(self, suggestion_id: str, score: int) -> Optional[SuggestionRecord]:
        rec = self.suggestions.get(suggestion_id)
        if rec is None:
            return None
        rec = rec.model_copy(update={"feedback_score": score})
        self.suggestions[suggestion_id] = rec
        return rec
