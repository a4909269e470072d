from __future__ import annotations
from datetime import datetime
from typing import List, Optional
import os
import logging

from .context import ContextExtractor
from .errors import AllSuggestionsBlocked
from .filters import AntiGenericFilter
from .generator import SuggestionGenerator
from .llm import LLMProvider, DummyProvider
from .patterns import DEFAULT_REGISTRY, PatternRegistry
from .prompt import PromptBuilder, current_time_of_day, suggestion_count
from .synthesis import build_suggestion
from ..models.schemas import (
    ConversationRecord,
    GenerationRequest,
    Profile,
    StylePreferences,
    Suggestion,
)


DEFAULT_TEMPERATURE = 0.8


class Pipeline:
    """extract context -> build prompt -> one LLM call -> parse -> filter -> synthesize.

    Holds no per-request state; the registry is shared read-only. Persisting the
    result is left to the caller.
    """

    def __init__(self, llm: LLMProvider | None = None, registry: PatternRegistry = DEFAULT_REGISTRY):
        self.registry = registry
        self.extractor = ContextExtractor(registry)
        self.prompts = PromptBuilder(self.extractor)
        self.filter = AntiGenericFilter(registry)
        self.llm = llm or DummyProvider()
        self.logger = logging.getLogger("flerta.pipeline")
        self.debug = os.getenv("FLERTA_DEBUG") == "1"

    @property
    def llm(self) -> LLMProvider:
        return self._llm

    @llm.setter
    def llm(self, provider: LLMProvider) -> None:
        self._llm = provider
        self.generator = SuggestionGenerator(provider)

    def build_request(
        self,
        conversation: ConversationRecord,
        profile: Profile,
        preferences: Optional[StylePreferences] = None,
        coach_mode: bool = False,
        now: Optional[datetime] = None,
    ) -> GenerationRequest:
        return GenerationRequest(
            conversation=conversation.to_context(),
            preferences=preferences or profile.preferences,
            platform=conversation.platform,
            coach_mode=coach_mode,
            time_of_day=current_time_of_day(profile.timezone, now=now),
            region=profile.timezone,
        )

    async def generate(self, request: GenerationRequest, llm_options: dict | None = None) -> List[Suggestion]:
        prompt = self.prompts.build_prompt(request)
        if self.debug:
            self.logger.debug("prompt: %s", prompt[:300] + ("…" if len(prompt) > 300 else ""))
        count = suggestion_count(request.coach_mode)

        options = dict(llm_options or {})
        temp = float(options.pop("temperature", DEFAULT_TEMPERATURE))
        candidates = await self.generator.generate(prompt, count, temperature=temp, options=options or None)

        accepted = self.filter.apply(candidates)
        if not accepted:
            self.logger.warning("suggestions.all_blocked parsed=%d", len(candidates))
            raise AllSuggestionsBlocked(
                f"all {len(candidates)} suggestions were blocked as too generic", blocked=len(candidates)
            )

        suggestions = [build_suggestion(text, request) for text in accepted]
        self.logger.info(
            "suggestions.generated parsed=%d accepted=%d coach=%s time_of_day=%s platform=%s",
            len(candidates),
            len(suggestions),
            request.coach_mode,
            request.time_of_day.value,
            request.platform,
        )
        return suggestions
