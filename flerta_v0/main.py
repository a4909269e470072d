from __future__ import annotations
from typing import List

import os
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .models.schemas import (
    HealthResponse,
    Profile,
    ProfileUpsertRequest,
    ConversationCreateRequest,
    ConversationRecord,
    SuggestRequest,
    SuggestResponse,
    SuggestionRecord,
    FeedbackRequest,
    ErrorResponse,
)
from .core.errors import ErrorKind, SuggestionError, MissingInput, UpstreamLookupFailure
from .core.pipeline import Pipeline
from .core.llm import LLMProvider, OpenAIProvider, OllamaProvider, DummyProvider
from .storage.memory import MemoryStore


app = FastAPI(title="flerta_v0", version="0.1.0")

# Configure logging for this app
_log_level_name = os.getenv("FLERTA_LOG_LEVEL", "INFO").upper()
_log_level = getattr(logging, _log_level_name, logging.INFO)
logger = logging.getLogger("flerta")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    logger.addHandler(handler)
logger.setLevel(_log_level)
logger.propagate = False

# Optional dev CORS (enable by setting FLERTA_DEV_CORS=1)
if os.getenv("FLERTA_DEV_CORS") == "1":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _select_llm(choice: str) -> LLMProvider:
    if choice == "ollama":
        return OllamaProvider()
    if choice == "dummy":
        return DummyProvider()
    if choice != "openai":
        logger.warning("llm.unknown_choice choice=%s using openai", choice)
    # a missing OPENAI_API_KEY surfaces per request as missing_input
    return OpenAIProvider()


# Single-process MVP instances
_llm_choice = os.getenv("FLERTA_LLM", "openai").lower()
llm = _select_llm(_llm_choice)
logger.info("llm.selected kind=%s", type(llm).__name__)
store = MemoryStore()
pipeline = Pipeline(llm=llm)

_STATUS_BY_KIND = {
    ErrorKind.MISSING_INPUT: 400,
    ErrorKind.UPSTREAM_LOOKUP_FAILURE: 404,
    ErrorKind.PROVIDER_FAILURE: 502,
    ErrorKind.ALL_SUGGESTIONS_BLOCKED: 503,
}


@app.exception_handler(SuggestionError)
async def suggestion_error_handler(request: Request, exc: SuggestionError):
    logger.warning("request.failed path=%s kind=%s detail=%s", request.url.path, exc.kind.value, exc.message)
    body = ErrorResponse(error=exc.kind.value, message=exc.user_message, detail=exc.message, retryable=exc.retryable)
    return JSONResponse(status_code=_STATUS_BY_KIND[exc.kind], content=body.model_dump())


@app.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health():
    return HealthResponse(status="ok")


@app.put("/profiles/{user_id}", response_model=Profile)
async def upsert_profile(user_id: str, req: ProfileUpsertRequest):
    profile = Profile(user_id=user_id, timezone=req.timezone, preferences=req.preferences)
    store.set_profile(profile)
    logger.info("profile.upserted user_id=%s timezone=%s", user_id, req.timezone)
    return profile


@app.post("/conversations", response_model=ConversationRecord)
async def create_conversation(req: ConversationCreateRequest):
    rec = store.add_conversation(req)
    logger.info(
        "conversation.created id=%s user_id=%s platform=%s messages=%d ocr_chars=%d",
        rec.id,
        rec.user_id,
        rec.platform,
        len(rec.parsed_messages or []),
        len(rec.ocr_text or ""),
    )
    return rec


@app.get("/conversations/{conversation_id}/suggestions", response_model=List[SuggestionRecord])
async def list_suggestions(conversation_id: str):
    if not store.get_conversation(conversation_id):
        raise UpstreamLookupFailure(f"conversation not found: {conversation_id}")
    return store.list_suggestions(conversation_id)


@app.post("/suggestions/generate", response_model=SuggestResponse)
async def generate_suggestions(req: SuggestRequest):
    logger.info(
        "generate.request conversation_id=%s coach=%s custom_prefs=%s",
        req.conversation_id,
        req.coach_mode,
        req.preferences is not None,
    )
    if not (req.conversation_id or "").strip():
        raise MissingInput("conversation_id is required")
    conv = store.get_conversation(req.conversation_id)
    if not conv:
        raise UpstreamLookupFailure(f"conversation not found: {req.conversation_id}")
    profile = store.get_profile(conv.user_id)
    if not profile:
        raise UpstreamLookupFailure(f"profile not found for user: {conv.user_id}")

    request = pipeline.build_request(conv, profile, preferences=req.preferences, coach_mode=req.coach_mode)
    suggestions = await pipeline.generate(request, llm_options=req.llm_options or None)
    saved = store.add_suggestions(conv.id, suggestions)
    logger.info("generate.done conversation_id=%s saved=%d", conv.id, len(saved))
    return SuggestResponse(conversation_id=conv.id, coach_mode=req.coach_mode, suggestions=saved)


@app.post("/suggestions/{suggestion_id}/copy", response_model=SuggestionRecord)
async def copy_suggestion(suggestion_id: str):
    rec = store.mark_copied(suggestion_id)
    if not rec:
        raise UpstreamLookupFailure(f"suggestion not found: {suggestion_id}")
    return rec


@app.post("/suggestions/{suggestion_id}/feedback", response_model=SuggestionRecord)
async def feedback(suggestion_id: str, data: FeedbackRequest):
    rec = store.set_feedback(suggestion_id, data.score)
    if not rec:
        raise UpstreamLookupFailure(f"suggestion not found: {suggestion_id}")
    logger.info("feedback.received suggestion_id=%s score=%d", suggestion_id, data.score)
    return rec
