"""
Services used by the HTTP layer: identification dispatch, demo platform
availability and web search.
"""

from .availability import AvailabilityEnhancer, DEMO_PLATFORMS
from .identification import IdentificationService, NOT_CONFIGURED_MESSAGE
from .web_search import WebSearchResult, WebSearchService

__all__ = [
    "AvailabilityEnhancer",
    "DEMO_PLATFORMS",
    "IdentificationService",
    "NOT_CONFIGURED_MESSAGE",
    "WebSearchResult",
    "WebSearchService",
]
