"""
Identification Provider Interface

This module provides a pluggable architecture for the AI model providers
used to identify movies and series from text, screenshots, clips and
actor names.
"""

from .types import (
    ContentMatch,
    IdentificationRequest,
    IdentificationResponse,
    MatchStatus,
    PlatformAvailability,
    Provenance,
    ProviderError,
    ProviderNotAvailableError,
    SearchKind,
)
from .base import IdentificationProvider
from .claude import ClaudeProvider
from .gemini import GeminiProvider
from .openai_vision import OpenAIProvider

# Registry of supported providers
PROVIDERS = {
    'openai': OpenAIProvider,
    'gemini': GeminiProvider,
    'claude': ClaudeProvider,
}


def get_provider_class(provider_key: str) -> type:
    """
    Look up a provider class by registry key.

    Args:
        provider_key: Name of the provider ('openai', 'gemini', 'claude')

    Returns:
        The provider class

    Raises:
        ValueError: If provider_key is not recognized
    """
    provider_key = (provider_key or "").lower()
    if provider_key not in PROVIDERS:
        available = ', '.join(PROVIDERS.keys())
        raise ValueError(f"Unknown provider '{provider_key}'. Available: {available}")

    return PROVIDERS[provider_key]


__all__ = [
    'ContentMatch',
    'IdentificationProvider',
    'IdentificationRequest',
    'IdentificationResponse',
    'MatchStatus',
    'PlatformAvailability',
    'Provenance',
    'ProviderError',
    'ProviderNotAvailableError',
    'SearchKind',
    'ClaudeProvider',
    'GeminiProvider',
    'OpenAIProvider',
    'get_provider_class',
    'PROVIDERS',
]
