from __future__ import annotations
import logging
from datetime import datetime, timezone as dt_timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .context import ContextExtractor
from ..models.schemas import GenerationRequest, TimeOfDay


DEFAULT_COUNT = 5
COACH_COUNT = 3

# Order matters: the model weighs earlier constraints more heavily.
HARD_CONSTRAINTS = (
    'NEVER use cliches such as "oi sumida", "como vai", "tudo bem", "gatinha", "gostosa" or "e aí".',
    "Sound authentically Brazilian: natural slang and everyday cultural references, never a translated voice.",
    "NEVER mention code, programming, technology, work or professional projects; "
    "use only the personal, emotional and romantic side of the conversation.",
    "Match the style sliders: high humor means playful but not forced, high subtlety means indirect "
    "and elegant, high boldness means confident but respectful.",
    "Match the formality of the platform (Tinder and Bumble are casual, WhatsApp is personal, Instagram is light).",
)

COACH_BLOCK = (
    "COACH MODE:\n"
    "- After each suggestion, explain WHY it works on lines starting with '>'.\n"
    "- Give timing and context tips.\n"
    "- Help the user understand the psychology behind it."
)

logger = logging.getLogger("flerta.prompt")


def suggestion_count(coach_mode: bool) -> int:
    return COACH_COUNT if coach_mode else DEFAULT_COUNT


def time_of_day_for_hour(hour: int) -> TimeOfDay:
    if 6 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 18:
        return TimeOfDay.AFTERNOON
    if 18 <= hour < 22:
        return TimeOfDay.EVENING
    return TimeOfDay.LATE_NIGHT


def current_time_of_day(tz_name: Optional[str], now: Optional[datetime] = None) -> TimeOfDay:
    """Time-of-day bucket for `now` (default: current time) seen from the user's timezone."""
    try:
        tz = ZoneInfo(tz_name) if tz_name else dt_timezone.utc
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning("prompt.unknown_timezone tz=%s falling back to UTC", tz_name)
        tz = dt_timezone.utc
    moment = now or datetime.now(tz=dt_timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt_timezone.utc)
    return time_of_day_for_hour(moment.astimezone(tz).hour)


class PromptBuilder:
    def __init__(self, extractor: ContextExtractor):
        self.extractor = extractor

    def build_prompt(self, request: GenerationRequest) -> str:
        prefs = request.preferences
        count = suggestion_count(request.coach_mode)
        context = self.extractor.extract(request.conversation) or "(no readable messages)"
        constraints = "\n".join(f"{i}. {c}" for i, c in enumerate(HARD_CONSTRAINTS, start=1))
        coach = f"\n{COACH_BLOCK}\n" if request.coach_mode else ""
        return (
            "You are FlertaAI, an expert in Brazilian romantic conversations.\n\n"
            "CONVERSATION SETTING:\n"
            f"Platform: {request.platform}\n"
            f"Time of day: {request.time_of_day.label}\n"
            f"Location: Brazil ({request.region})\n\n"
            "USER STYLE:\n"
            f"- Humor: {prefs.humor}%\n"
            f"- Subtlety: {prefs.subtlety}%\n"
            f"- Boldness: {prefs.boldness}%\n"
            f"- Length: {prefs.length}\n\n"
            "CONVERSATION:\n"
            f"{context}\n\n"
            "HARD CONSTRAINTS:\n"
            f"{constraints}\n"
            f"{coach}\n"
            f"Write {count} creative, authentic reply suggestions in Brazilian Portuguese. Avoid generic answers at all costs.\n"
            f"OUTPUT FORMAT: exactly {count} lines numbered 1. to {count}., one suggestion per line, "
            "no headings and no text before or after the list."
        )
