"""
Test utilities and helper functions.

Provides in-memory stand-ins for the provider SDK clients and helpers for
creating users and upload payloads.
"""

import io
import time
from types import SimpleNamespace
from typing import Dict, List, Optional

import httpx
from PIL import Image

from cineai.auth import hash_password
from cineai.providers import IdentificationProvider, IdentificationRequest
from cineai.storage import Database

MATRIX_REPLY = """{
  "results": [
    {
      "title": "The Matrix",
      "year": 1999,
      "type": "movie",
      "genre": ["Action", "Sci-Fi"],
      "rating": 8.7,
      "duration": "136 min",
      "description": "A hacker learns the world is a simulation.",
      "cast": ["Keanu Reeves", "Carrie-Anne Moss"],
      "director": "Lana Wachowski, Lilly Wachowski",
      "confidence": 92
    },
    {
      "title": "The Thirteenth Floor",
      "year": 1999,
      "type": "movie",
      "genre": ["Sci-Fi", "Mystery"],
      "rating": 7.0,
      "duration": "100 min",
      "description": "A simulated 1937 Los Angeles.",
      "cast": ["Craig Bierko"],
      "director": "Josef Rusnak",
      "confidence": 40
    }
  ]
}"""


class FakeProvider(IdentificationProvider):
    """Provider that returns a canned reply, optionally after a delay or with an error."""

    def __init__(self, key: str = "openai", reply: str = MATRIX_REPLY, error: Optional[Exception] = None,
                 delay: float = 0.0, default_confidence: float = 85):
        self._key = key
        self.reply = reply
        self.error = error
        self.delay = delay
        self.default_confidence = default_confidence
        self.requests: List[IdentificationRequest] = []

    @property
    def key(self) -> str:
        return self._key

    @property
    def name(self) -> str:
        return f"Fake {self._key}"

    def _generate(self, request: IdentificationRequest, prompt: str) -> str:
        self.requests.append(request)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


class RaisingProvider(FakeProvider):
    """Provider whose identify() itself raises, bypassing the adapter's error capture."""

    def identify(self, request):
        raise RuntimeError("adapter exploded")


class FakeOpenAIClient:
    """Mimics openai.OpenAI().chat.completions.create."""

    def __init__(self, reply: str = MATRIX_REPLY, error: Optional[Exception] = None):
        self.calls: List[Dict] = []
        self.reply = reply
        self.error = error
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))],
            usage=SimpleNamespace(prompt_tokens=120, completion_tokens=300),
        )


class FakeGeminiModel:
    """Mimics genai.GenerativeModel.generate_content."""

    def __init__(self, reply: str = MATRIX_REPLY, error: Optional[Exception] = None):
        self.calls: List[Dict] = []
        self.reply = reply
        self.error = error

    def generate_content(self, parts, generation_config=None):
        self.calls.append({"parts": parts, "generation_config": generation_config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            text=self.reply,
            usage_metadata=SimpleNamespace(prompt_token_count=80, candidates_token_count=200),
        )


class FakeAnthropicClient:
    """Mimics anthropic.Anthropic().messages.create."""

    def __init__(self, reply: str = MATRIX_REPLY, error: Optional[Exception] = None):
        self.calls: List[Dict] = []
        self.reply = reply
        self.error = error
        self.messages = SimpleNamespace(create=self._create)

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            content=[SimpleNamespace(type="text", text=self.reply)],
            usage=SimpleNamespace(input_tokens=100, output_tokens=250),
        )


class FakeHTTPResponse:
    def __init__(self, payload: Dict, status_code: int = 200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("GET", "https://www.googleapis.com/customsearch/v1")
            raise httpx.HTTPStatusError(
                f"HTTP {self.status_code}",
                request=request,
                response=httpx.Response(self.status_code, request=request),
            )

    def json(self):
        return self.payload


class FakeHTTPClient:
    """Stands in for httpx.Client in web search tests."""

    def __init__(self, response: Optional[FakeHTTPResponse] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[Dict] = []

    def get(self, url, params=None):
        self.calls.append({"url": url, "params": params})
        if self.error is not None:
            raise self.error
        return self.response


def create_test_user(
    db: Database,
    email: str,
    password: str = "Password123",
    name: Optional[str] = None,
    role: str = "user"
) -> Dict:
    """
    Create a user directly in the database.

    Returns:
        The stored record plus the plain-text password
    """
    user = db.create_user({
        "name": name or email.split("@")[0].title(),
        "email": email,
        "password_hash": hash_password(password),
        "role": role,
        "preferences": {"favorite_genres": [], "preferred_languages": ["English"]},
        "last_login_at": None,
    })
    return {**user, "password": password}


def make_image_bytes(size=(1600, 1200), fmt: str = "PNG", color=(200, 30, 30)) -> bytes:
    """A solid-colour image encoded in memory."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
