"""
Streaming availability enhancer.

There is no catalog integration yet: availability is drawn at random per
platform on every call and every entry is flagged is_synthetic. Do not
present it as real availability.
"""

import random
import re
from typing import List, Optional, Sequence, Tuple

from cineai.providers import ContentMatch, PlatformAvailability

# (name, icon, probability of being marked available)
DEMO_PLATFORMS: Sequence[Tuple[str, str, float]] = (
    ("Netflix", "🎬", 0.5),
    ("Amazon Prime", "📺", 0.6),
    ("Disney+", "🏰", 0.4),
    ("HBO Max", "🎭", 0.5),
    ("Hulu", "📱", 0.4),
    ("Apple TV+", "🍎", 0.3),
)


def _slugify(title: str) -> str:
    return re.sub(r"\s+", "-", title.strip().lower())


class AvailabilityEnhancer:
    """Attach demo platform availability to identification results."""

    def __init__(self, rng: Optional[random.Random] = None, platforms: Sequence[Tuple[str, str, float]] = DEMO_PLATFORMS):
        self.rng = rng or random.Random()
        self.platforms = platforms

    def platforms_for(self, title: str) -> List[PlatformAvailability]:
        slug = _slugify(title)
        result = []
        for name, icon, probability in self.platforms:
            available = self.rng.random() < probability
            result.append(PlatformAvailability(
                name=name,
                icon=icon,
                is_available=available,
                deep_link=f"#watch-{slug}" if available else None,
                is_subscription=True,
                is_synthetic=True,
            ))
        return result

    def enhance(self, items: List[ContentMatch]) -> List[ContentMatch]:
        for item in items:
            item.platforms = self.platforms_for(item.title)
        return items
