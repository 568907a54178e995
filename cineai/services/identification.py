"""
Identification service.

Holds the configured providers, tracks which one is active and routes
every identification request to it.
"""

import logging
import threading
from typing import Dict, List, Mapping, Optional, Type

from cineai.providers import (
    PROVIDERS,
    IdentificationProvider,
    IdentificationRequest,
    IdentificationResponse,
    Provenance,
    ProviderNotAvailableError,
)
from .availability import AvailabilityEnhancer

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "No AI provider configured. Please configure OpenAI, Gemini or Claude API keys."


class IdentificationService:
    """
    Provider registry and dispatcher.

    The registry maps a provider key to one constructed provider. It is
    only mutated by configure() and select_active(); both take a lock so
    concurrent identify() calls always see a consistent selection.
    """

    def __init__(
        self,
        default_provider: str = "openai",
        enhancer: Optional[AvailabilityEnhancer] = None,
        provider_classes: Optional[Mapping[str, Type[IdentificationProvider]]] = None,
    ):
        self._provider_classes = dict(provider_classes or PROVIDERS)
        self._providers: Dict[str, IdentificationProvider] = {}
        self._current = default_provider
        self._lock = threading.Lock()
        self.enhancer = enhancer or AvailabilityEnhancer()

    @classmethod
    def from_settings(cls, settings, enhancer: Optional[AvailabilityEnhancer] = None) -> "IdentificationService":
        """Build the service and register every provider with a configured key."""
        service = cls(default_provider=settings.default_provider, enhancer=enhancer)
        for provider_key, credential in settings.provider_keys.items():
            if not service.configure(provider_key, credential):
                logger.warning("Ignoring invalid credential for provider '%s'", provider_key)
        return service

    @property
    def supported_providers(self) -> List[str]:
        return list(self._provider_classes.keys())

    @property
    def current_provider(self) -> str:
        return self._current

    def available_providers(self) -> List[str]:
        with self._lock:
            return list(self._providers.keys())

    def register(self, provider: IdentificationProvider) -> None:
        """Register an already constructed provider under its own key."""
        with self._lock:
            self._providers[provider.key] = provider

    def configure(self, provider_key: str, credential: Optional[str]) -> bool:
        """
        Construct (or replace) the provider for a key.

        Args:
            provider_key: Registry key ('openai', 'gemini', 'claude')
            credential: API key for that provider

        Returns:
            True if the provider was registered, False if the key is
            unknown, the credential fails validation or construction fails
        """
        provider_key = (provider_key or "").lower()
        provider_class = self._provider_classes.get(provider_key)
        if provider_class is None:
            logger.warning("Cannot configure unknown provider '%s'", provider_key)
            return False

        if not provider_class.accepts_credential(credential):
            logger.warning("Rejected credential for provider '%s'", provider_key)
            return False

        try:
            provider = provider_class(credential)
        except Exception as e:
            logger.error("Failed to construct provider '%s': %s", provider_key, e)
            return False

        with self._lock:
            self._providers[provider_key] = provider
        logger.info("Configured provider '%s'", provider_key)
        return True

    def select_active(self, provider_key: str) -> None:
        """
        Make a registered provider the active one.

        Raises:
            ProviderNotAvailableError: If no provider is registered under the
                key; the previous selection is kept
        """
        provider_key = (provider_key or "").lower()
        with self._lock:
            if provider_key not in self._providers:
                raise ProviderNotAvailableError(f"Provider {provider_key} not available")
            self._current = provider_key
        logger.info("Active provider is now '%s'", provider_key)

    def identify(self, request: IdentificationRequest) -> IdentificationResponse:
        """
        Identify a movie or series with the active provider.

        Never raises. Without an active provider the fallback response is
        returned and no external service is contacted.
        """
        with self._lock:
            provider_key = self._current
            provider = self._providers.get(provider_key)

        if provider is None:
            return self.fallback_response()

        try:
            response = provider.identify(request)
        except Exception as e:
            logger.exception("Provider '%s' raised during identification", provider_key)
            return self.fallback_response(error=str(e), provider=provider_key)

        if response.success:
            response.items = self.enhancer.enhance(response.items)
        return response

    def fallback_response(self, error: Optional[str] = None, provider: Optional[str] = None) -> IdentificationResponse:
        """Response used when no identification could be attempted."""
        return IdentificationResponse(
            success=False,
            items=[],
            processing_time_ms=0,
            confidence=0,
            error_message=error or NOT_CONFIGURED_MESSAGE,
            source=Provenance.FALLBACK,
            provider=provider,
        )
