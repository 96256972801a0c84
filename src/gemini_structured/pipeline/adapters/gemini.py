"""Google GenAI SDK adapter."""

from __future__ import annotations

import logging

from google import genai
from google.genai import types

log = logging.getLogger(__name__)


class GoogleGenAIAdapter:
    """Sends requests with the asynchronous ``google-genai`` client."""

    def __init__(self, api_key: str, *, client: genai.Client | None = None) -> None:
        self._client = client or genai.Client(api_key=api_key)

    async def generate(
        self,
        *,
        model: str,
        contents: list[types.Content],
        config: types.GenerateContentConfig,
    ) -> types.GenerateContentResponse:
        log.debug("Calling %s with %d content turn(s)", model, len(contents))
        return await self._client.aio.models.generate_content(
            model=model,
            contents=contents,
            config=config,
        )

    def __repr__(self) -> str:
        return "<GoogleGenAIAdapter>"
