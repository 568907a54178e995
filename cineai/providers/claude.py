"""
Claude (Anthropic) provider for movie identification.

Uses Claude's vision capabilities for screenshots.
"""

import logging
import os
from typing import Any, List, Optional

import anthropic

from .base import IdentificationProvider, SYSTEM_PROMPT
from .types import IdentificationRequest, SearchKind

logger = logging.getLogger(__name__)


class ClaudeProvider(IdentificationProvider):
    """
    Anthropic Claude provider.

    Claude has no video input, so video requests are identified from the
    accompanying text only.
    """

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    credential_prefix = "sk-ant-"

    def __init__(self, api_key: str, model: Optional[str] = None, client: Any = None):
        if not api_key:
            raise ValueError("Anthropic API key is required")

        self.client = client or anthropic.Anthropic(api_key=api_key)
        self.model = model or os.environ.get('CLAUDE_MODEL', self.DEFAULT_MODEL)

    @property
    def key(self) -> str:
        return "claude"

    @property
    def name(self) -> str:
        return "Anthropic Claude Vision"

    def _generate(self, request: IdentificationRequest, prompt: str) -> str:
        logger.info("[Claude] Sending %s request to %s...", SearchKind(request.kind).value, self.model)

        response = self.client.messages.create(
            model=self.model,
            max_tokens=2048,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": self._build_message_content(request, prompt)}],
        )

        logger.info(
            "[Claude] API Usage: %s input, %s output tokens",
            response.usage.input_tokens,
            response.usage.output_tokens,
        )

        return "".join(
            block.text for block in response.content if getattr(block, 'type', None) == "text"
        )

    def _build_message_content(self, request: IdentificationRequest, prompt: str) -> List[dict]:
        content = []

        if SearchKind(request.kind) == SearchKind.IMAGE and request.has_binary:
            content.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": request.mime_type or "image/jpeg",
                    "data": request.encoded_content(),
                },
            })

        content.append({"type": "text", "text": prompt})
        return content
