from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from .patterns import DEFAULT_REGISTRY, PatternRegistry


class AntiGenericFilter:
    def __init__(self, registry: PatternRegistry = DEFAULT_REGISTRY):
        self.registry = registry
        self.logger = logging.getLogger("flerta.filters")

    def reason(self, text: str) -> Optional[str]:
        """Why `text` is rejected, or None when it is usable."""
        hit = self.registry.match_cliche(text)
        if hit:
            return f"cliche:{hit.lower()}"
        hit = self.registry.match_marketing(text)
        if hit:
            return f"generic_phrase:{hit}"
        hit = self.registry.contains_technical(text)
        if hit:
            return f"technical:{hit}"
        return None

    def is_generic(self, text: str) -> bool:
        return self.reason(text) is not None

    def apply(self, candidates: Iterable[str]) -> List[str]:
        accepted: List[str] = []
        for text in candidates:
            why = self.reason(text)
            if why:
                self.logger.info("suggestion.blocked reason=%s text=%s", why, text[:80])
                continue
            accepted.append(text)
        return accepted
