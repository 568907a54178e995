"""
Reply normalization.

Turns a model's free-form or JSON reply into ContentMatch records.
"""

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .types import ContentMatch, clamp_confidence

# Confidence stamped on the single synthetic match produced when a reply
# contains no usable JSON
DEGRADED_CONFIDENCE = 30
DEGRADED_SYNOPSIS_LENGTH = 200

# Placeholder artwork until a real poster source is integrated
POSTER_PLACEHOLDER_URL = "https://images.pexels.com/photos/7991579/pexels-photo-7991579.jpeg?auto=compress&cs=tinysrgb&w=400"
BACKDROP_PLACEHOLDER_URL = "https://images.pexels.com/photos/7991579/pexels-photo-7991579.jpeg?auto=compress&cs=tinysrgb&w=800"


@dataclass
class NormalizedReply:
    items: List[ContentMatch] = field(default_factory=list)
    degraded: bool = False
    reported_confidence: Optional[float] = None


def generate_match_id() -> str:
    return uuid.uuid4().hex


def placeholder_artwork(title: str) -> Dict[str, str]:
    """
    Resolve poster and backdrop URLs for a title.

    Every title currently gets the same placeholder images.
    """
    return {
        'poster_url': POSTER_PLACEHOLDER_URL,
        'backdrop_url': BACKDROP_PLACEHOLDER_URL,
    }


def _strip_code_fences(text: str) -> str:
    """Remove markdown ``` fences some models wrap around JSON."""
    if "```" not in text:
        return text
    lines = []
    for line in text.split("\n"):
        if line.strip().startswith("```"):
            continue
        lines.append(line)
    return "\n".join(lines)


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Find the first JSON object embedded in free text.

    Tries the whole text first, then every '{' in turn, decoding one
    complete JSON value from that position. Stray braces in prose are
    skipped rather than swallowing everything up to the last '}'.

    Args:
        text: Raw response from the model

    Returns:
        Parsed object, or None if no object could be decoded
    """
    if not text:
        return None

    text = _strip_code_fences(text)

    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    decoder = json.JSONDecoder()
    position = text.find('{')
    while position != -1:
        try:
            parsed, _ = decoder.raw_decode(text, position)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed
        position = text.find('{', position + 1)

    return None


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [str(value)]


def _as_year(value: Any) -> Optional[int]:
    try:
        return int(str(value)[:4])
    except (TypeError, ValueError):
        return None


def _as_rating(value: Any) -> float:
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return 0.0
    if rating != rating:  # NaN
        return 0.0
    return max(0.0, min(10.0, rating))


def coerce_match(entry: Dict[str, Any], default_confidence: float) -> ContentMatch:
    """
    Map one result entry from a model reply onto a ContentMatch.

    Accepts the field names the prompt asks for (genre, description)
    as well as the ContentMatch names (genres, synopsis).
    """
    title = str(entry.get('title') or entry.get('name') or "Unknown title").strip()

    genres = _as_list(entry.get('genres', entry.get('genre')))
    if not genres:
        genres = ["Unknown"]

    kind = str(entry.get('type') or "movie").lower()
    if kind in ("tv", "show", "tv series", "series"):
        kind = "series"
    elif kind != "movie":
        kind = "movie"

    confidence = entry.get('confidence')
    if confidence is None:
        confidence = default_confidence

    return ContentMatch(
        id=generate_match_id(),
        title=title,
        year=_as_year(entry.get('year')),
        type=kind,
        genres=genres,
        rating=_as_rating(entry.get('rating')),
        duration=str(entry.get('duration') or ""),
        synopsis=str(entry.get('description') or entry.get('synopsis') or ""),
        cast=_as_list(entry.get('cast')),
        director=str(entry.get('director') or ""),
        confidence=clamp_confidence(confidence),
        **placeholder_artwork(title),
    )


def degraded_match(text: str) -> ContentMatch:
    """Synthesize the single low-confidence match for an unparseable reply."""
    synopsis = text[:DEGRADED_SYNOPSIS_LENGTH]
    if len(text) > DEGRADED_SYNOPSIS_LENGTH:
        synopsis += "..."

    return ContentMatch(
        id=generate_match_id(),
        title="Content Identified",
        year=None,
        type="movie",
        genres=["Unknown"],
        rating=0.0,
        duration="",
        synopsis=synopsis,
        cast=[],
        director="Unknown",
        confidence=DEGRADED_CONFIDENCE,
        degraded=True,
        **placeholder_artwork("Content Identified"),
    )


def normalize_reply(text: str, default_confidence: float) -> NormalizedReply:
    """
    Convert a model reply into ContentMatch records.

    A reply holding a JSON object with a "results" array yields one match
    per array entry. An object without "results" is treated as a single
    match. A reply with no decodable JSON object yields exactly one
    degraded match whose synopsis is the start of the reply.

    Args:
        text: Raw response from the model
        default_confidence: Confidence used for entries that omit one

    Returns:
        NormalizedReply with the matches and whether they are degraded
    """
    parsed = extract_json_object(text)
    if parsed is None:
        return NormalizedReply(items=[degraded_match(text or "")], degraded=True)

    if 'results' in parsed:
        entries = parsed.get('results') or []
        if not isinstance(entries, list):
            entries = [entries]
    else:
        entries = [parsed]

    items = [
        coerce_match(entry, default_confidence)
        for entry in entries
        if isinstance(entry, dict)
    ]

    reported = None
    if entries and isinstance(entries[0], dict) and entries[0].get('confidence') is not None:
        reported = clamp_confidence(entries[0]['confidence'])

    return NormalizedReply(items=items, degraded=False, reported_confidence=reported)
