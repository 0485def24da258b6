"""
Gemini-based AI client for ai-changelog.

Sends a single ``generateContent`` request over the REST API and parses
the first candidate's text into changelog entries. Every failure is
fatal for the run; nothing is retried.
"""

from __future__ import annotations

import logging
import os
from typing import Any, List, Mapping, Optional

import requests

from ..config import AIConfig
from ..domain import ChangelogEntry
from ..errors import AIClientError, ConfigurationError
from .interface import AIClient, build_prompt
from .response import parse_entries

LOG = logging.getLogger(__name__)

API_KEY_HELP_URL = "https://makersuite.google.com/app/apikey"


class GeminiClient(AIClient):
    """
    Client for Google's Gemini ``generateContent`` endpoint.

    The API key is read from the environment variable named by
    AIConfig.api_key_env at construction time, so a missing credential
    fails before any git work is wasted on the request.
    """

    def __init__(
        self,
        config: AIConfig,
        env: Optional[Mapping[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        if env is None:
            env = os.environ
        api_key = env.get(config.api_key_env, "").strip()
        if not api_key:
            raise ConfigurationError(
                f"set the {config.api_key_env} environment variable "
                f"(get a key at {API_KEY_HELP_URL})"
            )
        self._config = config
        self._api_key = api_key
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self._config.endpoint.rstrip('/')}/models/{self._config.model}:generateContent"

    def _request_body(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._config.temperature,
                "maxOutputTokens": self._config.max_output_tokens,
                "responseMimeType": "application/json",
            },
        }

    def generate_entries(self, payload: str) -> List[ChangelogEntry]:
        prompt = build_prompt(payload)
        LOG.info("Requesting changelog entries from %s", self._config.model)
        LOG.debug("Prompt is %d characters", len(prompt))

        try:
            response = self._session.post(
                self.url,
                params={"key": self._api_key},
                json=self._request_body(prompt),
                timeout=self._config.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise AIClientError(f"Gemini request failed: {exc}") from exc

        if not response.ok:
            raise AIClientError(
                f"Gemini API error: {response.status_code} {response.text}",
                status=response.status_code,
                body=response.text,
            )

        text = _candidate_text(response)
        if not text:
            raise AIClientError("No response text from Gemini", status=response.status_code)

        LOG.debug("Gemini response text: %s", text)
        return parse_entries(text)


def _candidate_text(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return ""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    return "".join(part.get("text") or "" for part in parts if isinstance(part, dict)).strip()
