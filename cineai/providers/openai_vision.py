"""
OpenAI provider for movie identification.

Uses the chat completions API with image input for screenshots.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import openai

from .base import IdentificationProvider, SYSTEM_PROMPT
from .types import IdentificationRequest, SearchKind

logger = logging.getLogger(__name__)


class OpenAIProvider(IdentificationProvider):
    """
    OpenAI GPT vision provider.

    Text, actor and video requests are sent as plain chat messages;
    image requests attach the screenshot as a base64 data URL.
    """

    DEFAULT_MODEL = "gpt-4o"
    default_confidence = 85
    credential_prefix = "sk-"

    def __init__(self, api_key: str, model: Optional[str] = None, client: Any = None):
        if not api_key:
            raise ValueError("OpenAI API key is required")

        self.client = client or openai.OpenAI(api_key=api_key)
        self.model = model or os.environ.get('OPENAI_MODEL', self.DEFAULT_MODEL)

    @property
    def key(self) -> str:
        return "openai"

    @property
    def name(self) -> str:
        return "OpenAI GPT-4 Vision"

    def _generate(self, request: IdentificationRequest, prompt: str) -> str:
        messages = self._build_messages(request, prompt)
        logger.info("[OpenAI] Sending %s request to %s...", SearchKind(request.kind).value, self.model)

        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=2000,
            temperature=0.3,
            response_format={"type": "json_object"},
        )

        if not response.choices:
            raise ValueError("No response from OpenAI")

        usage = getattr(response, 'usage', None)
        if usage is not None:
            logger.info(
                "[OpenAI] Tokens: %s input, %s output",
                getattr(usage, 'prompt_tokens', 0),
                getattr(usage, 'completion_tokens', 0),
            )

        return response.choices[0].message.content

    def _build_messages(self, request: IdentificationRequest, prompt: str) -> List[Dict[str, Any]]:
        """Build the chat messages, attaching the image when there is one."""
        messages: List[Dict[str, Any]] = [{"role": "system", "content": SYSTEM_PROMPT}]

        if SearchKind(request.kind) == SearchKind.IMAGE and request.has_binary:
            mime_type = request.mime_type or "image/jpeg"
            messages.append({
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{request.encoded_content()}"},
                    },
                ],
            })
        else:
            messages.append({"role": "user", "content": prompt})

        return messages
