import os
import sys
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from flerta_v0.core.errors import ProviderFailure
from flerta_v0.core.generator import USER_INSTRUCTION, SuggestionGenerator, parse_candidates
from flerta_v0.core.llm import LLMProvider


class StubProvider(LLMProvider):
    def __init__(self, reply="", exc=None):
        self.reply = reply
        self.exc = exc
        self.calls = []

    async def generate(self, prompt, system=None, temperature=0.8, options=None):
        self.calls.append({"prompt": prompt, "system": system, "temperature": temperature, "options": options})
        if self.exc:
            raise self.exc
        return self.reply


@pytest.fixture
def anyio_backend():
    return "asyncio"


def test_parse_keeps_marked_lines_in_order():
    completion = (
        "Claro! Seguem as sugestões:\n"
        "1. Primeira ideia\n"
        "  2.   Segunda ideia  \n"
        "> porque funciona\n"
        "- Terceira ideia\n"
        "sem marcador\n"
        "4. Quarta ideia\n"
    )
    assert parse_candidates(completion, 5) == ["Primeira ideia", "Segunda ideia", "Terceira ideia", "Quarta ideia"]


def test_parse_truncates_to_requested_count():
    completion = "\n".join(f"{i}. ideia {i}" for i in range(1, 6))
    assert parse_candidates(completion, 3) == ["ideia 1", "ideia 2", "ideia 3"]


def test_parse_ignores_numbers_outside_range():
    completion = "1. ok um\n4. fora\n10. fora também\n0. zero\n2. ok dois"
    assert parse_candidates(completion, 3) == ["ok um", "ok dois"]


def test_parse_strips_wrapping_quotes_and_empty_items():
    completion = '1. "Com aspas"\n2. “Curvas”\n3.\n- '
    assert parse_candidates(completion, 5) == ["Com aspas", "Curvas"]


def test_parse_strips_markdown_emphasis():
    completion = '1. **Negrito simples**\n2. *Itálico*\n3. **"Aspas dentro do negrito"**\n4. **Dica:** texto com rótulo'
    assert parse_candidates(completion, 5) == [
        "Negrito simples",
        "Itálico",
        "Aspas dentro do negrito",
        "**Dica:** texto com rótulo",
    ]


def test_parse_unmarked_completion_is_empty():
    assert parse_candidates("Só um parágrafo solto sem lista.", 5) == []
    assert parse_candidates("", 5) == []


@pytest.mark.anyio
async def test_generate_sends_prompt_as_system_message():
    llm = StubProvider(reply="1. Uma\n2. Duas")
    gen = SuggestionGenerator(llm)
    out = await gen.generate("SYSTEM PROMPT", 5, temperature=0.95, options={"seed": 3})
    assert out == ["Uma", "Duas"]
    call = llm.calls[0]
    assert call["system"] == "SYSTEM PROMPT"
    assert call["prompt"] == USER_INSTRUCTION
    assert call["temperature"] == 0.95
    assert call["options"] == {"seed": 3}


@pytest.mark.anyio
async def test_generate_without_parsable_lines_fails():
    gen = SuggestionGenerator(StubProvider(reply="Desculpe, não posso ajudar."))
    with pytest.raises(ProviderFailure) as ei:
        await gen.generate("p", 5)
    assert "no recognizable suggestions" in str(ei.value)
    assert not ei.value.retryable


@pytest.mark.anyio
async def test_unexpected_provider_error_becomes_provider_failure():
    gen = SuggestionGenerator(StubProvider(exc=RuntimeError("socket closed")))
    with pytest.raises(ProviderFailure) as ei:
        await gen.generate("p", 5)
    assert "socket closed" in str(ei.value)
    assert isinstance(ei.value.__cause__, RuntimeError)


@pytest.mark.anyio
async def test_provider_failure_passes_through_unchanged():
    original = ProviderFailure("OpenAI API error: rate limited", status_code=429)
    gen = SuggestionGenerator(StubProvider(exc=original))
    with pytest.raises(ProviderFailure) as ei:
        await gen.generate("p", 5)
    assert ei.value is original
