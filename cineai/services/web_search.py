"""
Google Custom Search integration.

Looks up a text query on movie review sites so the UI can show links next
to the AI identification results.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
MOVIE_SITES_SUFFIX = (
    "movie OR series OR film site:imdb.com OR site:rottentomatoes.com OR site:metacritic.com"
)
RESULTS_PER_QUERY = 6


@dataclass
class WebSearchResult:
    title: str
    link: str
    snippet: str = ""
    display_link: str = ""
    thumbnail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'link': self.link,
            'snippet': self.snippet,
            'display_link': self.display_link,
            'thumbnail': self.thumbnail,
        }


def _thumbnail(item: Dict[str, Any]) -> Optional[str]:
    pagemap = item.get("pagemap") or {}
    for key in ("cse_thumbnail", "cse_image"):
        images = pagemap.get(key) or []
        if images and isinstance(images[0], dict) and images[0].get("src"):
            return images[0]["src"]
    return None


class WebSearchService:
    """Thin client for the Custom Search JSON API."""

    def __init__(self, api_key: Optional[str] = None, engine_id: Optional[str] = None,
                 client: Optional[httpx.Client] = None, timeout: float = 10.0):
        self.api_key = api_key
        self.engine_id = engine_id
        self.timeout = timeout
        self._client = client

    def is_configured(self) -> bool:
        return bool(self.api_key and self.engine_id)

    def configure(self, api_key: str, engine_id: str) -> None:
        self.api_key = api_key
        self.engine_id = engine_id

    def search_movies(self, query: str) -> List[WebSearchResult]:
        """
        Search movie sites for a free-text query.

        Returns:
            Up to six results; an empty list when the service is not
            configured or the request fails
        """
        if not self.is_configured() or not query or not query.strip():
            return []

        params = {
            "key": self.api_key,
            "cx": self.engine_id,
            "q": f"{query.strip()} {MOVIE_SITES_SUFFIX}",
            "num": RESULTS_PER_QUERY,
            "safe": "active",
        }

        try:
            if self._client is not None:
                response = self._client.get(GOOGLE_SEARCH_URL, params=params)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(GOOGLE_SEARCH_URL, params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Google search failed: %s", e)
            return []

        results = []
        for item in data.get("items") or []:
            if not item.get("link"):
                continue
            results.append(WebSearchResult(
                title=item.get("title", ""),
                link=item["link"],
                snippet=item.get("snippet", ""),
                display_link=item.get("displayLink", ""),
                thumbnail=_thumbnail(item),
            ))
        return results
