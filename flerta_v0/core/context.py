from __future__ import annotations
import logging
import re
from typing import Any, Iterable, List, Optional, Tuple

from .patterns import DEFAULT_REGISTRY, PatternRegistry
from ..models.schemas import ConversationContext, SELF_ROLES


MAX_MESSAGES = 10
MIN_MESSAGE_CHARS = 3  # content must be longer than this
MIN_SENTENCE_CHARS = 5  # trimmed sentence must be longer than this
FOCUS_LIMIT = 5
FOCUS_MARKER = "[FOCUS: ignore technical/numeric information; use only personal/romantic context]"

SELF_LABEL = "You"
OTHER_LABEL = "Match"

_DISALLOWED = re.compile(r"[^\w\sÀ-ÿ:.,!?()\-]")
_BLANK_LINES = re.compile(r"\n\s*\n")
_WHITESPACE = re.compile(r"\s+")
_TERMINATORS = re.compile(r"[.!?]+")
_DIGITS_AND_PUNCT = re.compile(r"[\d\W_]+")


class ContextExtractor:
    """Turn a conversation into the plain-text context that goes into the prompt.

    Structured messages win when at least one of the recent ones carries real
    content; otherwise the raw OCR text is scrubbed of technical noise.
    """

    def __init__(self, registry: PatternRegistry = DEFAULT_REGISTRY):
        self.registry = registry
        self.logger = logging.getLogger("flerta.context")

    def extract(self, conversation: ConversationContext) -> str:
        rendered = self._render_messages(conversation.messages or [])
        if rendered:
            return rendered
        return self.filter_technical(conversation.raw_text or "")

    def _render_messages(self, messages: Iterable[Any]) -> str:
        lines: List[str] = []
        for role, content in (_coerce(m) for m in list(messages)[-MAX_MESSAGES:]):
            # flatten so each message is exactly one line
            content = " ".join(content.split())
            if len(content) <= MIN_MESSAGE_CHARS:
                continue
            label = SELF_LABEL if role in SELF_ROLES else OTHER_LABEL
            lines.append(f"{label}: {content}")
        return "\n".join(lines)

    def filter_technical(self, text: str) -> str:
        cleaned = _DISALLOWED.sub(" ", text or "")
        cleaned = _BLANK_LINES.sub("\n", cleaned)
        cleaned = _WHITESPACE.sub(" ", cleaned).strip()
        if not cleaned:
            return ""

        sentences = _TERMINATORS.split(cleaned)
        kept = [s.strip() for s in sentences if self._keep_sentence(s)]
        dropped = len(sentences) - len(kept)
        if dropped:
            self.logger.debug("context.sentences_dropped total=%d dropped=%d", len(sentences), dropped)

        if len(kept) < max(2, 0.3 * len(sentences)):
            body = ". ".join(kept[:FOCUS_LIMIT])
            return f"{FOCUS_MARKER}\n{body}".strip()
        return ". ".join(kept).strip()

    def _keep_sentence(self, sentence: str) -> bool:
        trimmed = sentence.strip()
        if len(trimmed) <= MIN_SENTENCE_CHARS:
            return False
        if _DIGITS_AND_PUNCT.fullmatch(trimmed):
            return False
        return self.registry.contains_technical(trimmed) is None


def _coerce(message: Any) -> Tuple[str, str]:
    """Read (role, content) from a ChatMessage or a loose dict without raising."""
    if isinstance(message, dict):
        role, content = message.get("role"), message.get("content")
    else:
        role, content = getattr(message, "role", None), getattr(message, "content", None)
    role_str: Optional[str] = role if isinstance(role, str) else None
    content_str = content if isinstance(content, str) else ("" if content is None else str(content))
    return (role_str or "").strip().lower(), content_str
