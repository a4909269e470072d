from __future__ import annotations
import logging
import re
import time
from typing import Any, Dict, List, Optional

from .errors import ProviderFailure, SuggestionError
from .llm import LLMProvider


USER_INSTRUCTION = "Generate reply suggestions for this conversation, following the instructions."

_MARKER = re.compile(r"^\s*(?:(\d+)\.|-)\s*(.*)$")
_QUOTE_PAIRS = {'"': '"', "“": "”", "'": "'"}
_EMPHASIS = re.compile(r"^(\*{1,2})([^*]+)\1$")


def _strip_wrapping(text: str) -> str:
    """Peel markdown emphasis and quotes that wrap the whole item, e.g. **"Oi"**."""
    while True:
        m = _EMPHASIS.match(text)
        if m:
            text = m.group(2).strip()
        elif len(text) >= 2 and _QUOTE_PAIRS.get(text[0]) == text[-1]:
            text = text[1:-1].strip()
        else:
            return text


def parse_candidates(completion: str, count: int) -> List[str]:
    """Pull the numbered (1. .. count.) or dashed lines out of a completion.

    Unmarked lines are discarded; the result keeps completion order and is
    truncated to `count`.
    """
    candidates: List[str] = []
    for line in (completion or "").splitlines():
        m = _MARKER.match(line)
        if not m:
            continue
        number = m.group(1)
        if number is not None and not 1 <= int(number) <= count:
            continue
        text = _strip_wrapping(m.group(2).strip())
        if not text:
            continue
        candidates.append(text)
        if len(candidates) == count:
            break
    return candidates


class SuggestionGenerator:
    def __init__(self, llm: LLMProvider):
        self.llm = llm
        self.logger = logging.getLogger("flerta.pipeline")

    async def generate(
        self,
        prompt: str,
        count: int,
        temperature: float = 0.8,
        options: Optional[Dict[str, Any]] = None,
    ) -> List[str]:
        t0 = time.time()
        try:
            completion = await self.llm.generate(prompt=USER_INSTRUCTION, system=prompt, temperature=temperature, options=options)
        except SuggestionError:
            raise
        except Exception as e:
            raise ProviderFailure(f"language model call failed: {e}") from e
        llm_ms = int((time.time() - t0) * 1000)

        candidates = parse_candidates(completion, count)
        self.logger.debug("generator.parsed count=%d requested=%d llm_ms=%d", len(candidates), count, llm_ms)
        if not candidates:
            preview = completion.replace("\n", " ")[:120]
            raise ProviderFailure(f"completion had no recognizable suggestions: {preview!r}")
        return candidates
