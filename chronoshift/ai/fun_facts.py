"""Short location fun facts from Gemini."""
from __future__ import annotations

import logging

import requests

from chronoshift.config.settings import Settings, get_settings

logger = logging.getLogger("chronoshift.ai")

NOT_CONFIGURED_MESSAGE = "Gemini API not configured. Cannot fetch fun fact."
EMPTY_RESPONSE_MESSAGE = "Could not get a fun fact from Gemini. The response was empty."
INVALID_KEY_MESSAGE = "Error: The provided Gemini API key is not valid. Please check your .env configuration."


class ProviderError(RuntimeError):
    """Raised when Gemini fails to produce a completion."""

    def __init__(self, provider: str, message: str, original: Exception | None = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.original = original


def build_prompt(topic: str) -> str:
    return f"Tell me a short, interesting, and kid-friendly fun fact about {topic}. Keep it under 50 words."


class FunFactClient:
    endpoint = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.api_key = settings.gemini_api_key
        self.model = settings.fun_fact_model
        self._session = requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def name(self) -> str:
        return f"Gemini {self.model}"

    def generate(self, prompt: str) -> str:
        url = f"{self.endpoint}/models/{self.model}:generateContent"
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            response = self._session.post(url, params={"key": self.api_key}, json=body, timeout=30)
            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError as exc:
                raise ProviderError(self.name(), f"HTTP {response.status_code}: {response.text}", exc) from exc
            payload = response.json()
        except ProviderError:
            raise
        except requests.exceptions.RequestException as exc:
            raise ProviderError(self.name(), "Network error", exc) from exc
        except ValueError as exc:
            raise ProviderError(self.name(), "Malformed response body", exc) from exc
        if not isinstance(payload, dict):
            raise ProviderError(self.name(), f"Unexpected response body: {type(payload).__name__}")

        candidates = payload.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts") or [{}]
        return str(parts[0].get("text") or "")

    def get_fun_fact(self, topic: str) -> str:
        """Return a fun fact about ``topic``, or a readable diagnostic; never raises."""
        if not self.api_key:
            logger.warning("Gemini API key not found. Fun fact feature is disabled.")
            return NOT_CONFIGURED_MESSAGE
        try:
            text = self.generate(build_prompt(topic))
        except ProviderError as exc:
            logger.error("Error fetching fun fact from Gemini: %s", exc)
            if "API key not valid" in str(exc):
                return INVALID_KEY_MESSAGE
            return f"Error fetching fun fact: {exc}"
        if not text.strip():
            return EMPTY_RESPONSE_MESSAGE
        return text.strip()

    def close(self) -> None:
        self._session.close()
