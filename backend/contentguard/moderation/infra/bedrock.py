"""Bedrock runtime adapter for the text classifier."""

from __future__ import annotations

import asyncio
import json
from typing import Any

from contentguard.moderation.domain.analyzers import TextClassifier
from contentguard.moderation.domain.exceptions import ProviderError
from contentguard.moderation.domain.models import TextAnalysis
from contentguard.moderation.infra.aws import AWS_ERRORS, describe


class BedrockTextClassifier(TextClassifier):
    """Invokes an Anthropic messages model and returns the first text block of the reply."""

    def __init__(self, client: Any, *, model_id: str, anthropic_version: str, max_tokens: int) -> None:
        self._client = client
        self.model_id = model_id
        self.anthropic_version = anthropic_version
        self.max_tokens = max_tokens

    def request_body(self, prompt: str) -> str:
        return json.dumps(
            {
                "anthropic_version": self.anthropic_version,
                "max_tokens": self.max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            }
        )

    def _invoke(self, prompt: str) -> bytes:
        response = self._client.invoke_model(
            modelId=self.model_id,
            body=self.request_body(prompt),
            contentType="application/json",
            accept="application/json",
        )
        stream = response["body"]
        try:
            return stream.read()
        finally:
            stream.close()

    async def classify(self, prompt: str) -> str:
        try:
            raw = await asyncio.to_thread(self._invoke, prompt)
        except AWS_ERRORS as exc:
            raise ProviderError(TextAnalysis.service, describe(exc)) from exc
        try:
            payload = json.loads(raw)
            text = payload["content"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError(TextAnalysis.service, f"unexpected model response: {exc}") from exc
        if not isinstance(text, str):
            raise ProviderError(TextAnalysis.service, "model reply is not text")
        return text
