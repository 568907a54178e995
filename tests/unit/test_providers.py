"""
Unit tests for the provider adapters.

SDK clients are replaced with in-memory fakes; nothing leaves the process.
"""

import pytest

from cineai.providers import (
    PROVIDERS,
    ClaudeProvider,
    GeminiProvider,
    IdentificationRequest,
    MatchStatus,
    OpenAIProvider,
    Provenance,
    SearchKind,
    get_provider_class,
)
from cineai.providers.base import SYSTEM_PROMPT
from tests.utils import (
    MATRIX_REPLY,
    FakeAnthropicClient,
    FakeGeminiModel,
    FakeOpenAIClient,
    FakeProvider,
    make_image_bytes,
)

OPENAI_KEY = "sk-" + "a" * 45
GEMINI_KEY = "AIza" + "b" * 35
CLAUDE_KEY = "sk-ant-" + "c" * 40


def text_request(query="A hacker discovers reality is simulated"):
    return IdentificationRequest(kind=SearchKind.TEXT, content=query, query=query)


def image_request():
    return IdentificationRequest(kind=SearchKind.IMAGE, content=make_image_bytes((40, 30), "JPEG"),
                                 mime_type="image/jpeg")


@pytest.mark.unit
class TestRegistry:
    """Test the closed set of provider variants."""

    def test_known_keys(self):
        """openai, gemini and claude are the supported variants."""
        assert set(PROVIDERS) == {"openai", "gemini", "claude"}
        assert get_provider_class("Gemini") is GeminiProvider

    def test_unknown_key(self):
        """Unknown keys list the available ones."""
        with pytest.raises(ValueError) as exc_info:
            get_provider_class("llama")

        assert "Available: openai, gemini, claude" in str(exc_info.value)


@pytest.mark.unit
class TestCredentialHeuristics:
    """Test credential prefix and length checks."""

    @pytest.mark.parametrize("provider_class,credential,expected", [
        (OpenAIProvider, OPENAI_KEY, True),
        (OpenAIProvider, "sk-short", False),
        (OpenAIProvider, "pk-" + "a" * 45, False),
        (OpenAIProvider, "sk-" + "a" * 20 + " " + "a" * 20, False),
        (GeminiProvider, GEMINI_KEY, True),
        (GeminiProvider, "AIza" + "b" * 10, False),
        (ClaudeProvider, CLAUDE_KEY, True),
        (ClaudeProvider, OPENAI_KEY, False),
    ])
    def test_accepts_credential(self, provider_class, credential, expected):
        """Each provider recognises only plausible keys of its own."""
        assert provider_class.accepts_credential(credential) is expected

    @pytest.mark.parametrize("credential", [None, "", "   "])
    def test_empty_credentials_rejected(self, credential):
        """Empty credentials are never accepted."""
        for provider_class in PROVIDERS.values():
            assert provider_class.accepts_credential(credential) is False

    def test_constructor_requires_key(self):
        """Constructing without a key fails fast."""
        with pytest.raises(ValueError):
            OpenAIProvider("", client=FakeOpenAIClient())


@pytest.mark.unit
class TestPrompts:
    """Test kind-specific instructions."""

    def test_each_kind_has_distinct_wording(self):
        """Text, image, video and actor prompts differ."""
        provider = FakeProvider()
        prompts = {
            provider.get_prompt(IdentificationRequest(kind=SearchKind.TEXT, content="q", query="q")),
            provider.get_prompt(IdentificationRequest(kind=SearchKind.ACTOR, content="q", query="q")),
            provider.get_prompt(IdentificationRequest(kind=SearchKind.IMAGE, content=b"x")),
            provider.get_prompt(IdentificationRequest(kind=SearchKind.VIDEO, content=b"x")),
        }

        assert len(prompts) == 4

    def test_query_embedded(self):
        """The user's text appears in text and actor prompts."""
        provider = FakeProvider()
        prompt = provider.get_prompt(IdentificationRequest(kind=SearchKind.ACTOR, content="Keanu Reeves",
                                                           query="Keanu Reeves"))

        assert '"Keanu Reeves"' in prompt

    def test_video_prompt_without_native_video(self):
        """Providers that cannot see the clip say so in the prompt."""
        request = IdentificationRequest(kind=SearchKind.VIDEO, content=b"clip", query="rooftop chase")

        openai_prompt = OpenAIProvider(OPENAI_KEY, client=FakeOpenAIClient()).get_prompt(request)
        claude_prompt = ClaudeProvider(CLAUDE_KEY, client=FakeAnthropicClient()).get_prompt(request)
        gemini_prompt = GeminiProvider(GEMINI_KEY, model=FakeGeminiModel()).get_prompt(request)

        assert "not attached" in openai_prompt
        assert "not attached" in claude_prompt
        assert "not attached" not in gemini_prompt
        assert "rooftop chase" in openai_prompt


@pytest.mark.unit
class TestOpenAIProvider:
    """Test the chat completions adapter."""

    def test_text_request(self):
        """Text requests are plain chat messages with JSON output requested."""
        client = FakeOpenAIClient()
        provider = OpenAIProvider(OPENAI_KEY, client=client)

        response = provider.identify(text_request())

        assert response.success
        assert response.provider == "openai"
        assert response.source == Provenance.LIVE
        assert len(response.items) == 2
        assert response.confidence == 92
        call = client.calls[0]
        assert call["model"] == "gpt-4o"
        assert call["response_format"] == {"type": "json_object"}
        assert call["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert isinstance(call["messages"][1]["content"], str)

    def test_image_request_attaches_data_url(self):
        """Images are sent as a base64 data URL next to the prompt."""
        client = FakeOpenAIClient()
        provider = OpenAIProvider(OPENAI_KEY, client=client)

        provider.identify(image_request())

        parts = client.calls[0]["messages"][1]["content"]
        assert parts[0]["type"] == "text"
        assert parts[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")

    def test_default_confidence(self):
        """Replies without a confidence fall back to 85."""
        provider = OpenAIProvider(OPENAI_KEY, client=FakeOpenAIClient(reply='{"results": [{"title": "Up"}]}'))

        response = provider.identify(text_request())

        assert response.confidence == 85
        assert response.items[0].confidence == 85

    def test_sdk_error_becomes_failed_response(self):
        """Exceptions from the SDK are captured in the envelope."""
        provider = OpenAIProvider(OPENAI_KEY, client=FakeOpenAIClient(error=RuntimeError("401 Unauthorized")))

        response = provider.identify(text_request())

        assert response.success is False
        assert response.items == []
        assert response.confidence == 0
        assert "401 Unauthorized" in response.error_message
        assert response.status == MatchStatus.PROVIDER_ERROR
        assert response.processing_time_ms >= 0

    def test_empty_reply_is_an_error(self):
        """An empty completion is reported as a failure."""
        provider = OpenAIProvider(OPENAI_KEY, client=FakeOpenAIClient(reply=""))

        response = provider.identify(text_request())

        assert response.success is False
        assert "No response" in response.error_message


@pytest.mark.unit
class TestGeminiProvider:
    """Test the generate_content adapter."""

    def test_text_request(self):
        """Text prompts include the JSON schema and default to 88 confidence."""
        model = FakeGeminiModel(reply='Sure! {"results": [{"title": "Heat", "year": 1995}]}')
        provider = GeminiProvider(GEMINI_KEY, model=model)

        response = provider.identify(text_request("bank robbers in LA"))

        assert response.success
        assert response.provider == "gemini"
        assert response.confidence == 88
        assert response.items[0].title == "Heat"
        parts = model.calls[0]["parts"]
        assert len(parts) == 1
        assert SYSTEM_PROMPT in parts[0]
        assert "bank robbers in LA" in parts[0]

    def test_video_sent_inline(self):
        """Video bytes are attached inline with their MIME type."""
        model = FakeGeminiModel()
        provider = GeminiProvider(GEMINI_KEY, model=model)
        clip = b"\x00\x00\x00\x18ftypmp42"

        provider.identify(IdentificationRequest(kind=SearchKind.VIDEO, content=clip, mime_type="video/mp4"))

        inline = model.calls[0]["parts"][1]
        assert inline == {"mime_type": "video/mp4", "data": clip}
        assert provider.supports_native_video

    def test_unparseable_reply_is_degraded(self):
        """Prose-only replies succeed with one low-confidence degraded match."""
        provider = GeminiProvider(GEMINI_KEY, model=FakeGeminiModel(reply="I cannot identify this."))

        response = provider.identify(text_request())

        assert response.success
        assert response.source == Provenance.DEGRADED
        assert response.status == MatchStatus.LOW_CONFIDENCE
        assert response.confidence == 30
        assert len(response.items) == 1


@pytest.mark.unit
class TestClaudeProvider:
    """Test the messages API adapter."""

    def test_text_request(self):
        """The schema goes in the system prompt and text blocks are joined."""
        client = FakeAnthropicClient()
        provider = ClaudeProvider(CLAUDE_KEY, client=client)

        response = provider.identify(text_request())

        assert response.success
        assert response.provider == "claude"
        assert [m.title for m in response.items] == ["The Matrix", "The Thirteenth Floor"]
        call = client.calls[0]
        assert call["system"] == SYSTEM_PROMPT
        assert call["messages"][0]["content"][-1]["type"] == "text"

    def test_image_request(self):
        """Images are sent as a base64 source block before the prompt."""
        client = FakeAnthropicClient()
        provider = ClaudeProvider(CLAUDE_KEY, client=client)

        provider.identify(image_request())

        block = client.calls[0]["messages"][0]["content"][0]
        assert block["type"] == "image"
        assert block["source"]["type"] == "base64"
        assert block["source"]["media_type"] == "image/jpeg"

    def test_video_request_is_text_only(self):
        """Claude has no video input, so only the prompt is sent."""
        client = FakeAnthropicClient()
        provider = ClaudeProvider(CLAUDE_KEY, client=client)

        provider.identify(IdentificationRequest(kind=SearchKind.VIDEO, content=b"clip", query="space opera"))

        content = client.calls[0]["messages"][0]["content"]
        assert len(content) == 1
        assert "space opera" in content[0]["text"]


@pytest.mark.unit
class TestTiming:
    """Test processing time measurement."""

    def test_elapsed_time_reflects_delay(self):
        """A provider that takes 500ms reports roughly 500ms."""
        provider = FakeProvider(delay=0.5)

        response = provider.identify(text_request())

        assert 500 <= response.processing_time_ms < 1500

    def test_failed_call_still_timed(self):
        """Failures report the time spent before the error."""
        provider = FakeProvider(delay=0.2, error=TimeoutError("timed out"))

        response = provider.identify(text_request())

        assert response.success is False
        assert response.processing_time_ms >= 200
