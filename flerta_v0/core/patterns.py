from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


DEFAULT_CLICHES = (
    r"\boi\s+sumida\b",
    r"\bcomo\s+vai\b",
    r"\btudo\s+bem\b",
    r"\bboa\s+noite\s+linda\b",
    r"\bgatinha\b",
    r"\bgostosa\b",
    r"\be\s+aí\b",
)

DEFAULT_TECHNICAL_TERMS = (
    "terraform", "deploy", "código", "codigos", "projeto", "implementar", "implementando",
    "javascript", "python", "react", "node", "api", "backend", "frontend", "database",
    "git", "github", "docker", "kubernetes", "aws", "cloud", "devops", "ci/cd",
    "programming", "developer", "tech", "software", "hardware", "framework",
    "biblioteca", "library", "function", "variable", "array", "object", "class",
    "integration", "integração", "continuous", "contínua", "pipeline", "repository",
)

DEFAULT_MARKETING_PHRASES = (
    "copy-paste pickup lines",
    "clichê responses",
    "generic openers",
    "boring conversations",
    "predictable messages",
)


@dataclass(frozen=True)
class PatternRegistry:
    """Read-only lookup tables shared by the context extractor and the filter."""

    cliches: Tuple[re.Pattern, ...]
    technical_terms: Tuple[str, ...]
    marketing_phrases: Tuple[str, ...]

    @classmethod
    def build(
        cls,
        cliches: Iterable[str],
        technical_terms: Iterable[str],
        marketing_phrases: Iterable[str],
    ) -> "PatternRegistry":
        return cls(
            cliches=tuple(re.compile(p, flags=re.IGNORECASE) for p in cliches),
            technical_terms=tuple(t.lower() for t in technical_terms),
            marketing_phrases=tuple(p.lower() for p in marketing_phrases),
        )

    @classmethod
    def default(cls) -> "PatternRegistry":
        return cls.build(DEFAULT_CLICHES, DEFAULT_TECHNICAL_TERMS, DEFAULT_MARKETING_PHRASES)

    def match_cliche(self, text: str) -> Optional[str]:
        for pattern in self.cliches:
            m = pattern.search(text)
            if m:
                return m.group(0)
        return None

    def contains_technical(self, text: str) -> Optional[str]:
        lowered = text.lower()
        for term in self.technical_terms:
            if term in lowered:
                return term
        return None

    def match_marketing(self, text: str) -> Optional[str]:
        lowered = text.lower()
        for phrase in self.marketing_phrases:
            if phrase in lowered:
                return phrase
        return None


# Built once at import time and never mutated.
DEFAULT_REGISTRY = PatternRegistry.default()
