from __future__ import annotations
import os
import logging
from typing import Optional, Dict, Any

import httpx

from .errors import MissingInput, ProviderFailure


class LLMProvider:
    async def generate(self, prompt: str, system: Optional[str] = None, temperature: float = 0.8, options: Optional[Dict[str, Any]] = None) -> str:
        """Return one text completion for `prompt` under the `system` instructions."""
        raise NotImplementedError


def _provider_message(r: httpx.Response) -> str:
    """Pull the provider's own error message out of a failed response."""
    try:
        data = r.json()
    except ValueError:
        return r.text[:200] or r.reason_phrase
    err = data.get("error") if isinstance(data, dict) else None
    if isinstance(err, dict):
        return str(err.get("message") or "Unknown error")
    if isinstance(err, str):
        return err
    return "Unknown error"


class OpenAIProvider(LLMProvider):
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 60.0,
        max_tokens: int = 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.base_url = base_url or os.getenv("OPENAI_BASE", "https://api.openai.com")
        self.model = model or os.getenv("OPENAI_MODEL", "gpt-4o")
        self.timeout = timeout
        self.max_tokens = max_tokens
        self._transport = transport
        self.logger = logging.getLogger("flerta.llm")

    async def generate(self, prompt: str, system: Optional[str] = None, temperature: float = 0.8, options: Optional[Dict[str, Any]] = None) -> str:
        if not self.api_key:
            raise MissingInput("OPENAI_API_KEY is not configured")
        messages = [{"role": "user", "content": prompt}]
        if system is not None:
            messages.insert(0, {"role": "system", "content": system})
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": self.max_tokens,
        }
        if options:
            payload.update(options)
        url = f"{self.base_url}/v1/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise ProviderFailure(f"OpenAI API request failed: {e}") from e
        if r.is_error:
            raise ProviderFailure(f"OpenAI API error: {_provider_message(r)}", status_code=r.status_code)
        try:
            data = r.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderFailure("OpenAI API returned a malformed completion") from e
        usage = data.get("usage") or {}
        self.logger.debug(
            "openai.generate model=%s prompt_tokens=%s completion_tokens=%s",
            self.model,
            usage.get("prompt_tokens"),
            usage.get("completion_tokens"),
        )
        return content or ""


class OllamaProvider(LLMProvider):
    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or os.getenv("OLLAMA_BASE", "http://127.0.0.1:11434")
        self.model = model or os.getenv("OLLAMA_MODEL", "llama3:8b")
        self.timeout = timeout
        self._transport = transport
        self.logger = logging.getLogger("flerta.llm")

    def _merge_options(self, temperature: float, options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        merged = {"temperature": temperature}
        if options:
            merged.update(options)
        return merged

    async def generate(self, prompt: str, system: Optional[str] = None, temperature: float = 0.8, options: Optional[Dict[str, Any]] = None) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": self._merge_options(temperature, options),
        }
        if system is not None:
            payload["system"] = system
        url = f"{self.base_url}/api/generate"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise ProviderFailure(f"Ollama request failed: {e}") from e
        if r.is_error:
            raise ProviderFailure(f"Ollama error: {_provider_message(r)}", status_code=r.status_code)
        try:
            data = r.json()
        except ValueError as e:
            raise ProviderFailure("Ollama returned a malformed completion") from e
        # Log tokens/sec if available
        eval_count = data.get("eval_count")
        eval_dur_ns = data.get("eval_duration")
        if eval_count and eval_dur_ns:
            tps = float(eval_count) / (float(eval_dur_ns) / 1e9)
            self.logger.debug("ollama.generate tokens=%s eval_ms=%.1f tps=%.1f", eval_count, float(eval_dur_ns) / 1e6, tps)
        return data.get("response", "")


class DummyProvider(LLMProvider):
    async def generate(self, prompt: str, system: Optional[str] = None, temperature: float = 0.8, options: Optional[Dict[str, Any]] = None) -> str:
        # Deterministic draft when no LLM is available
        return (
            "Aqui vão algumas ideias:\n"
            "1. Confesso que fiquei curioso com essa sua viagem, quando sai o relato completo?\n"
            "2. Sábado parece perfeito, mas só se você escolher o lugar da sobremesa\n"
            "3. Essa sua risada deve ser contagiante, cara, me conta mais\n"
            "4. Achei massa o seu gosto musical, qual show você não perderia?\n"
            "5. Você tem cara de quem sabe o melhor pastel da cidade, acertei?"
        )
