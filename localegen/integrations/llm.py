from __future__ import annotations

import logging
from typing import Any, Callable

import httpx

from localegen.core.config import AppSettings
from localegen.core.errors import ExternalServiceError


logger = logging.getLogger(__name__)


TRANSLATION_PROMPT_TEMPLATE = (
    "Translate the following text from {source} to {target}. "
    "Only output the translated text, with no additional information or explanation."
    '\n\nText: "{text}"'
)


def build_translation_prompt(text: str, source_language: str, target_language: str) -> str:
    return TRANSLATION_PROMPT_TEMPLATE.format(
        source=source_language,
        target=target_language,
        text=text,
    )


class TranslationEndpointClient:
    """Chat-completions style client for the external translation endpoint."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ):
        self._endpoint = settings.translation_endpoint_url
        self._model = settings.translation_model
        self._temperature = settings.translation_temperature
        self._api_key = (
            settings.translation_api_key.get_secret_value()
            if settings.translation_api_key
            else None
        )
        timeout = settings.translation_timeout_seconds
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def translate(self, text: str, *, source_language: str, target_language: str) -> str:
        """Translate ``text`` with the fixed instruction prompt."""
        prompt = build_translation_prompt(text, source_language, target_language)
        return await self.complete([{"role": "user", "content": prompt}])

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """Send one completion request and return the first choice's content."""
        payload: dict[str, Any] = {
            "messages": messages,
            "temperature": self._temperature,
        }
        if self._model:
            payload["model"] = self._model

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        logger.debug("Posting completion request to %s", self._endpoint)
        try:
            async with self._client_factory() as client:
                response = await client.post(self._endpoint, json=payload, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            raise ExternalServiceError(
                f"Translation endpoint request failed: {exc}"
            ) from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise ExternalServiceError(
                f"Translation endpoint returned status {response.status_code}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )

        return self._extract_content(response)

    def _extract_content(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError as exc:
            raise ExternalServiceError(
                "Translation endpoint returned a non-JSON body.",
                status_code=response.status_code,
            ) from exc

        choices = body.get("choices") if isinstance(body, dict) else None
        if not isinstance(choices, list) or not choices:
            raise ExternalServiceError(
                "Translation endpoint response contained no choices.",
                status_code=response.status_code,
            )

        first = choices[0]
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ExternalServiceError(
                "Translation endpoint choice is missing message content.",
                status_code=response.status_code,
            )
        return content
