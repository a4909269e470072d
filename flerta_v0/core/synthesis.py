from __future__ import annotations
import re
from typing import List

from ..models.schemas import CulturalContext, GenerationRequest, StyleSnapshot, Suggestion


MAX_ALTERNATIVES = 2

# Each swap yields at most one alternative.
SYNONYM_SWAPS = (
    (re.compile(r"\b(cara|mano)\b"), "pessoa"),
    (re.compile(r"\b(massa|legal)\b"), "interessante"),
)


def synthesize_alternatives(text: str) -> List[str]:
    alternatives: List[str] = []
    for pattern, replacement in SYNONYM_SWAPS:
        alt = pattern.sub(replacement, text)
        if alt != text and alt not in alternatives:
            alternatives.append(alt)
    return alternatives[:MAX_ALTERNATIVES]


def synthesize_reasoning(request: GenerationRequest) -> List[str]:
    if not request.coach_mode:
        return []
    prefs = request.preferences
    return [
        f"Adapted to the {request.time_of_day.label}",
        f"Tone tuned to your preferences (humor: {prefs.humor}%, subtlety: {prefs.subtlety}%, boldness: {prefs.boldness}%)",
        f"Authentic Brazilian voice for {request.platform}",
    ]


def build_suggestion(text: str, request: GenerationRequest) -> Suggestion:
    prefs = request.preferences
    return Suggestion(
        text=text,
        style=StyleSnapshot(
            humor=prefs.humor,
            subtlety=prefs.subtlety,
            boldness=prefs.boldness,
            length=prefs.length,
            platform=request.platform,
            time_of_day=request.time_of_day,
        ),
        reasoning=synthesize_reasoning(request),
        alternatives=synthesize_alternatives(text),
        cultural_context=CulturalContext(region=request.region),
        timing_appropriate=True,
    )
