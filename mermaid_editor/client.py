"""Completion client: natural-language prompt -> Mermaid source."""

import logging
import re
from typing import Optional

import httpx
from pydantic import ValidationError

from .config import ModelConfig, get_model_config
from .errors import (
    EmptyInputError,
    MalformedResponseError,
    MissingCredentialError,
    ServiceError,
)
from .models import ChatCompletionRequest, ChatCompletionResponse, ChatMessage
from .prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)


# First words of Mermaid diagram declarations. A bare fence followed by one
# of these on the same line is diagram source, not a language tag.
DIAGRAM_KEYWORDS = frozenset({
    "graph", "flowchart", "sequencediagram", "classdiagram", "statediagram",
    "statediagram-v2", "erdiagram", "journey", "gantt", "pie", "quadrantchart",
    "requirementdiagram", "gitgraph", "c4context", "mindmap", "timeline",
    "sankey-beta", "xychart-beta", "block-beta",
})

_OPENING_FENCE = re.compile(r"\A```([\w+.-]*)[ \t]*(?:\r?\n|\Z)")
_CLOSING_FENCE = re.compile(r"(?:\r?\n)?```\Z")


def strip_code_fences(text: str) -> str:
    """Remove surrounding ``` fences (with or without a language tag)."""
    text = text.strip()
    opening = _OPENING_FENCE.match(text)
    if opening:
        tag = opening.group(1)
        if tag.lower() in DIAGRAM_KEYWORDS:
            text = text[3:]
        else:
            text = text[opening.end():]
    elif text.startswith("```"):
        text = text[3:]
    text = _CLOSING_FENCE.sub("", text.rstrip())
    return text.strip()


class CompletionClient:
    """Single-shot chat completion request returning cleaned diagram source.

    No streaming, no retries and no timeout; callers decide whether to
    try again.
    """

    def __init__(
        self,
        config: Optional[ModelConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or get_model_config()
        self._transport = transport

    def build_request(self, prompt: str) -> ChatCompletionRequest:
        return ChatCompletionRequest(
            model=self.config.model,
            messages=[
                ChatMessage(role="system", content=SYSTEM_PROMPT),
                ChatMessage(role="user", content=build_user_prompt(prompt)),
            ],
            temperature=self.config.temperature,
        )

    async def generate(self, prompt: str, secret: str) -> str:
        """Generate Mermaid source for `prompt`.

        Raises MissingCredentialError / EmptyInputError before any network
        call, ServiceError on a non-success status or transport failure and
        MalformedResponseError when the body lacks the completion text.
        """
        if not secret:
            raise MissingCredentialError()
        if not prompt or not prompt.strip():
            raise EmptyInputError()

        body = self.build_request(prompt).model_dump()
        headers = {"Authorization": f"Bearer {secret}"}

        logger.info("Requesting diagram from %s", self.config)
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=None) as client:
                response = await client.post(self.config.completion_url, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Completion request failed: %s", e)
            raise ServiceError(message=f"API request failed: {e}") from e

        logger.info("Completion service answered %s", response.status_code)
        if not response.is_success:
            raise ServiceError(status=response.status_code)

        try:
            parsed = ChatCompletionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Malformed completion response: %s", e)
            raise MalformedResponseError() from e

        return strip_code_fences(parsed.content)
