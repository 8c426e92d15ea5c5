"""
Minimal client for OpenAI-compatible chat-completions APIs (OpenAI, Groq).

One instance is built at startup from `Settings` and shared by the content
routes.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
import requests

from .config import Settings
from .errors import CompletionConfigurationError, CompletionError

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class CompletionClient:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "CompletionClient":
        if not settings.openai_api_key:
            logger.warning("OPENAI_API_KEY is not set; text generation routes will fail")
        return cls(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.llm_model,
            timeout=settings.llm_timeout_seconds,
            session=session,
        )

    def complete(self, messages: List[Message], temperature: float = 0.8) -> Optional[str]:
        """
        Send ``messages`` and return the first choice's content.

        Returns None when the API answers without any content.

        Raises:
            CompletionConfigurationError: no API key configured.
            CompletionError: transport failure, non-2xx status or a malformed body.
        """
        if not self.api_key:
            raise CompletionConfigurationError("OPENAI_API_KEY is not configured")

        payload = {"model": self.model, "messages": messages, "temperature": temperature}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            resp = self.session.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise CompletionError(f"Completion request failed: {exc}") from exc
        except ValueError as exc:
            raise CompletionError("Completion response was not JSON") from exc

        choices = body.get("choices") if isinstance(body, dict) else None
        if not choices:
            return None
        try:
            return choices[0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise CompletionError("Unexpected completion response shape") from exc

    async def acomplete(self, messages: List[Message], temperature: float = 0.8) -> Optional[str]:
        return await run_in_threadpool(self.complete, messages, temperature)

    def close(self) -> None:
        self.session.close()
