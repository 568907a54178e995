"""
Base classes and interfaces for identification providers.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Optional

from .normalize import normalize_reply
from .types import (
    IdentificationRequest,
    IdentificationResponse,
    Provenance,
    SearchKind,
)

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are an expert movie and TV series identification AI. Always respond with a JSON object containing an array of identified content with the following structure:
{
  "results": [
    {
      "title": "Movie/Series Title",
      "year": 2023,
      "type": "movie" or "series",
      "genre": ["Action", "Drama"],
      "rating": 8.5,
      "duration": "120 min" or "45 min/episode",
      "description": "Brief description",
      "cast": ["Actor 1", "Actor 2"],
      "director": "Director Name",
      "confidence": 95
    }
  ]
}
Respond with the JSON object only."""


class IdentificationProvider(ABC):
    """
    Abstract base class for movie identification providers.

    Each provider implements _generate to send one request to its
    external API and return the model's raw text reply. Timing, reply
    normalization and error capture are shared.
    """

    # Confidence reported when the reply carries none. Not derived from
    # any model signal.
    default_confidence: float = 85

    # Credential heuristics used by the registry before constructing a provider
    credential_prefix: str = ""
    min_credential_length: int = 20

    @property
    @abstractmethod
    def key(self) -> str:
        """Registry key, e.g. 'openai'."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable provider name."""
        pass

    @property
    def supports_native_video(self) -> bool:
        """Return True if the provider accepts raw video bytes."""
        return False

    @classmethod
    def accepts_credential(cls, credential: Optional[str]) -> bool:
        """
        Check whether a credential plausibly belongs to this provider.

        Args:
            credential: The API key supplied by configuration or a user

        Returns:
            True if the key is non-empty, has no whitespace, is long
            enough and starts with the provider's prefix
        """
        if not credential or not credential.strip():
            return False
        if any(ch.isspace() for ch in credential):
            return False
        if len(credential) < cls.min_credential_length:
            return False
        return credential.startswith(cls.credential_prefix)

    @abstractmethod
    def _generate(self, request: IdentificationRequest, prompt: str) -> str:
        """
        Send one request to the external API.

        Args:
            request: The identification request
            prompt: Kind-specific instruction text

        Returns:
            The model's raw text reply
        """
        pass

    def identify(self, request: IdentificationRequest) -> IdentificationResponse:
        """
        Identify a movie or series. Never raises; failures come back as
        an unsuccessful response carrying the error message.
        """
        start = time.perf_counter()
        try:
            prompt = self.get_prompt(request)
            reply = self._generate(request, prompt)
            elapsed = self._elapsed_ms(start)

            if not reply:
                raise ValueError(f"No response from {self.name}")

            logger.debug("[%s] Reply received in %dms (%d chars)", self.name, elapsed, len(reply))
            return self.create_response_from_reply(reply, elapsed)

        except Exception as e:
            elapsed = self._elapsed_ms(start)
            logger.warning("[%s] Error during identification: %s", self.name, e)
            return self.create_error_response(str(e), elapsed)

    def get_prompt(self, request: IdentificationRequest) -> str:
        """
        Generate the kind-specific instruction. Can be overridden by providers.

        Args:
            request: The identification request

        Returns:
            Prompt string for the model
        """
        kind = SearchKind(request.kind)
        if kind == SearchKind.TEXT:
            return (
                f'Identify movies or TV series based on this description: "{request.text}". '
                "Return detailed information including title, year, genre, cast, director, "
                "and streaming platforms."
            )
        if kind == SearchKind.IMAGE:
            return (
                "Analyze this image and identify the movie or TV series. Look for actors, "
                "scenes, logos, or any visual clues. Provide detailed information about the "
                "identified content."
            )
        if kind == SearchKind.ACTOR:
            return (
                f'Find movies and TV series featuring the actor/actress: "{request.text}". '
                "Include their most popular and recent works with detailed information."
            )
        if not self.supports_native_video:
            prompt = (
                "The user uploaded a video clip from a movie or TV series, but the clip "
                "itself is not attached. Identify the source material from the user's "
                "description only, and lower your confidence accordingly."
            )
        else:
            prompt = (
                "This is a video clip from a movie or TV series. Analyze the visual content, "
                "actors, scenes, and dialogue to identify the source material."
            )
        if request.query:
            prompt += f'\nThe user adds: "{request.query}"'
        return prompt

    def create_response_from_reply(self, reply: str, elapsed_ms: int) -> IdentificationResponse:
        """
        Normalize a raw reply into an IdentificationResponse.

        Args:
            reply: Raw text reply from the model
            elapsed_ms: Wall-clock time of the external call

        Returns:
            Successful response; degraded when no JSON could be extracted
        """
        normalized = normalize_reply(reply, self.default_confidence)

        if normalized.degraded:
            confidence = normalized.items[0].confidence
            source = Provenance.DEGRADED
        elif normalized.reported_confidence is not None:
            confidence = normalized.reported_confidence
            source = Provenance.LIVE
        else:
            confidence = self.default_confidence if normalized.items else 0
            source = Provenance.LIVE

        return IdentificationResponse(
            success=True,
            items=normalized.items,
            processing_time_ms=elapsed_ms,
            confidence=confidence,
            source=source,
            provider=self.key,
        )

    def create_error_response(self, error: str, elapsed_ms: int = 0) -> IdentificationResponse:
        """Create a response indicating the external call failed."""
        return IdentificationResponse(
            success=False,
            items=[],
            processing_time_ms=elapsed_ms,
            confidence=0,
            error_message=error,
            source=Provenance.LIVE,
            provider=self.key,
        )

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int(round((time.perf_counter() - start) * 1000))
