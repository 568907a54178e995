"""
Data types shared by identification providers and the identification service.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

# Responses below this confidence are reported as low-confidence matches
LOW_CONFIDENCE_THRESHOLD = 60


def clamp_confidence(value: Any) -> float:
    """Coerce a provider-reported confidence into [0, 100]; junk becomes 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number:  # NaN
        return 0.0
    return max(0.0, min(100.0, number))


class SearchKind(str, Enum):
    """What the user submitted."""
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    ACTOR = "actor"


class Provenance(str, Enum):
    """Where the items of a response came from."""
    LIVE = "live"
    DEGRADED = "degraded"
    FALLBACK = "fallback"


class MatchStatus(str, Enum):
    NOT_CONFIGURED = "not_configured"
    PROVIDER_ERROR = "provider_error"
    NO_MATCH = "no_match"
    LOW_CONFIDENCE = "low_confidence"
    HIGH_CONFIDENCE = "high_confidence"


class ProviderError(Exception):
    """Base class for provider registry errors."""


class ProviderNotAvailableError(ProviderError):
    """Raised when selecting a provider that has not been configured."""


@dataclass(frozen=True)
class IdentificationRequest:
    """A single identification request from the user."""
    kind: SearchKind
    content: Union[str, bytes]
    query: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def has_binary(self) -> bool:
        return isinstance(self.content, (bytes, bytearray))

    @property
    def text(self) -> str:
        """The free text the user typed, if any."""
        if self.query:
            return self.query
        return "" if self.has_binary else str(self.content)

    def encoded_content(self) -> str:
        """Base64 encoding of the binary payload."""
        return base64.standard_b64encode(bytes(self.content)).decode("utf-8")


@dataclass
class PlatformAvailability:
    """Where a title can be watched. Demo data, see AvailabilityEnhancer."""
    name: str
    icon: str
    is_available: bool
    deep_link: Optional[str] = None
    is_subscription: bool = True
    is_synthetic: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'icon': self.icon,
            'is_available': self.is_available,
            'deep_link': self.deep_link,
            'is_subscription': self.is_subscription,
            'is_synthetic': self.is_synthetic,
        }


@dataclass
class ContentMatch:
    """One candidate movie or series identification."""
    id: str
    title: str
    year: Optional[int] = None
    type: str = "movie"
    genres: List[str] = field(default_factory=list)
    rating: float = 0.0
    duration: str = ""
    synopsis: str = ""
    cast: List[str] = field(default_factory=list)
    director: str = ""
    confidence: float = 0.0
    poster_url: str = ""
    backdrop_url: str = ""
    platforms: List[PlatformAvailability] = field(default_factory=list)
    degraded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage and API responses."""
        return {
            'id': self.id,
            'title': self.title,
            'year': self.year,
            'type': self.type,
            'genres': list(self.genres),
            'rating': self.rating,
            'duration': self.duration,
            'synopsis': self.synopsis,
            'cast': list(self.cast),
            'director': self.director,
            'confidence': self.confidence,
            'poster_url': self.poster_url,
            'backdrop_url': self.backdrop_url,
            'platforms': [p.to_dict() for p in self.platforms],
            'degraded': self.degraded,
        }


@dataclass
class IdentificationResponse:
    """Uniform envelope returned for every identification request."""
    success: bool
    items: List[ContentMatch] = field(default_factory=list)
    processing_time_ms: int = 0
    confidence: float = 0.0
    error_message: Optional[str] = None
    source: Provenance = Provenance.LIVE
    provider: Optional[str] = None

    def __post_init__(self):
        self.processing_time_ms = max(0, int(self.processing_time_ms))
        self.confidence = clamp_confidence(self.confidence)

    @property
    def status(self) -> MatchStatus:
        if not self.success:
            if self.source == Provenance.FALLBACK:
                return MatchStatus.NOT_CONFIGURED
            return MatchStatus.PROVIDER_ERROR
        if not self.items:
            return MatchStatus.NO_MATCH
        if self.source == Provenance.DEGRADED or self.confidence < LOW_CONFIDENCE_THRESHOLD:
            return MatchStatus.LOW_CONFIDENCE
        return MatchStatus.HIGH_CONFIDENCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'results': [item.to_dict() for item in self.items],
            'processing_time_ms': self.processing_time_ms,
            'confidence': self.confidence,
            'error': self.error_message,
            'source': self.source.value,
            'status': self.status.value,
            'provider': self.provider,
        }

