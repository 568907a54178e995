"""
Google Gemini provider for movie identification.

Gemini accepts images and short video clips inline, so both are sent
as raw bytes next to the prompt.
"""

import logging
import os
from typing import Any, Optional

import google.generativeai as genai

from .base import IdentificationProvider, SYSTEM_PROMPT
from .types import IdentificationRequest, SearchKind

logger = logging.getLogger(__name__)


class GeminiProvider(IdentificationProvider):
    """
    Google Gemini provider.

    Replies are free text that usually, but not always, contains a JSON
    object; normalization handles the embedded and unparseable cases.
    """

    DEFAULT_MODEL = "gemini-2.0-flash"
    default_confidence = 88
    credential_prefix = "AIza"
    min_credential_length = 30

    def __init__(self, api_key: str, model_name: Optional[str] = None, model: Any = None):
        if not api_key:
            raise ValueError("Gemini API key is required")

        self.model_name = model_name or os.environ.get('GEMINI_MODEL', self.DEFAULT_MODEL)
        if model is None:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(self.model_name)
        self.model = model

    @property
    def key(self) -> str:
        return "gemini"

    @property
    def name(self) -> str:
        return "Google Gemini Vision"

    @property
    def supports_native_video(self) -> bool:
        return True

    def get_prompt(self, request: IdentificationRequest) -> str:
        kind = SearchKind(request.kind)
        if kind == SearchKind.TEXT:
            prompt = (
                f'Identify movies or TV series based on this description: "{request.text}". '
                "Provide detailed JSON response with title, year, genre, cast, director, "
                "and streaming availability."
            )
        elif kind == SearchKind.IMAGE:
            prompt = (
                "Analyze this image to identify the movie or TV series. Look for actors, "
                "scenes, text, or visual elements that can help identify the content."
            )
        elif kind == SearchKind.ACTOR:
            prompt = (
                f'Find movies and TV series featuring: "{request.text}". '
                "Include popular works with detailed information in JSON format."
            )
        else:
            prompt = (
                "Watch this clip from a movie or TV series. Use the actors, scenes, "
                "setting and any dialogue to identify the source material."
            )
            if request.query:
                prompt += f'\nThe user adds: "{request.query}"'

        return f"{prompt}\n\n{SYSTEM_PROMPT}"

    def _generate(self, request: IdentificationRequest, prompt: str) -> str:
        parts: list = [prompt]

        kind = SearchKind(request.kind)
        if request.has_binary and kind in (SearchKind.IMAGE, SearchKind.VIDEO):
            default_mime = "image/jpeg" if kind == SearchKind.IMAGE else "video/mp4"
            parts.append({
                "mime_type": request.mime_type or default_mime,
                "data": bytes(request.content),
            })

        logger.info("[Gemini] Sending %s request to %s...", kind.value, self.model_name)

        response = self.model.generate_content(
            parts,
            generation_config=genai.GenerationConfig(
                max_output_tokens=2048,
                temperature=0.3,
            ),
        )

        usage = getattr(response, 'usage_metadata', None)
        if usage is not None:
            logger.info(
                "[Gemini] Tokens: %s input, %s output",
                getattr(usage, 'prompt_token_count', 0),
                getattr(usage, 'candidates_token_count', 0),
            )

        return response.text
