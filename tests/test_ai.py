import json

import httpx
import pytest

from minigram.ai import service as ai_svc
from minigram.ai.client import GenerativeTextClient, get_ai_client, split_image
from minigram.core.errors import ExternalServiceError, ValidationError
from tests.helpers import FakeAIClient, register


def _gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client(handler, api_key="k-123") -> GenerativeTextClient:
    return GenerativeTextClient(
        api_key=api_key,
        model="gemini-test",
        base_url="https://ai.mail.com/v1beta/",
        transport=httpx.MockTransport(handler),
    )


class TestParsers:
    def test_numbered_list(self):
        text = "1. First caption #a\n2) Second one\n\n  3.   Third  \n"
        assert ai_svc.parse_numbered_list(text) == ["First caption #a", "Second one", "Third"]

    def test_hashtags_are_lowercased_and_unique(self):
        text = "#Sunset #beach word #SUNSET # #Travel"
        assert ai_svc.parse_hashtags(text) == ["#sunset", "#beach", "#travel"]

    def test_split_image(self):
        assert split_image("data:image/png;base64,AAAA") == ("image/png", "AAAA")
        assert split_image(" BBBB ") == ("image/jpeg", "BBBB")


class TestGenerativeTextClient:
    async def test_sends_prompt_and_returns_text(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_reply("  A caption  "))

        text = await _client(handler).generate("describe", "data:image/png;base64,QUJD")
        assert text == "A caption"
        assert seen["url"] == "https://ai.mail.com/v1beta/models/gemini-test:generateContent"
        assert seen["key"] == "k-123"
        parts = seen["body"]["contents"][0]["parts"]
        assert parts[0] == {"text": "describe"}
        assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": "QUJD"}}

    async def test_provider_error_status(self):
        client = _client(lambda request: httpx.Response(500, json={"error": "boom"}))
        with pytest.raises(ExternalServiceError) as exc:
            await client.generate("x")
        assert exc.value.message == "AI provider returned 500"

    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        with pytest.raises(ExternalServiceError) as exc:
            await _client(handler).generate("x")
        assert exc.value.message == "AI provider request failed"

    async def test_empty_answer(self):
        client = _client(lambda request: httpx.Response(200, json={"candidates": []}))
        with pytest.raises(ExternalServiceError) as exc:
            await client.generate("x")
        assert exc.value.message == "AI provider returned no text"

    async def test_missing_api_key(self):
        client = _client(lambda request: httpx.Response(200, json=_gemini_reply("x")), api_key=None)
        with pytest.raises(ExternalServiceError) as exc:
            await client.generate("x")
        assert exc.value.message == "GEMINI_API_KEY not configured"


class TestAIService:
    async def test_blank_description(self):
        with pytest.raises(ValidationError) as exc:
            await ai_svc.generate_caption(FakeAIClient(), "   ")
        assert exc.value.message == "Image description is required"

    async def test_suggestions_are_split(self):
        fake = FakeAIClient("1. One #a\n2. Two #b\n3. Three #c")
        assert await ai_svc.generate_suggestions(fake, "a dog") == ["One #a", "Two #b", "Three #c"]
        assert "a dog" in fake.calls[0][0]


class TestAIEndpoints:
    async def test_generate_caption(self, client, fake_ai):
        alice = await register(client, "alice")
        res = await client.post(
            "/api/ai/generate-caption",
            json={"imageDescription": "sunset at the beach", "base64Image": "QUJD"},
            headers=alice["headers"],
        )
        assert res.status_code == 200
        assert res.json() == {
            "success": True,
            "message": "Caption generated successfully",
            "caption": "Sunset vibes #sunset #beach",
        }
        prompt, image = fake_ai.calls[0]
        assert "sunset at the beach" in prompt
        assert image == "QUJD"

    async def test_generate_hashtags(self, client):
        alice = await register(client, "alice")
        res = await client.post(
            "/api/ai/generate-hashtags",
            json={"caption": "Sunset vibes"},
            headers=alice["headers"],
        )
        assert res.status_code == 200
        assert res.json()["hashtags"] == ["#sunset", "#beach"]

    async def test_generate_suggestions(self, client, fake_ai):
        fake_ai.reply = "1. First\n2. Second\n3. Third"
        alice = await register(client, "alice")
        res = await client.post(
            "/api/ai/generate-suggestions",
            json={"imageDescription": "a cat"},
            headers=alice["headers"],
        )
        assert res.status_code == 200
        assert res.json()["suggestions"] == ["First", "Second", "Third"]

    async def test_blank_description_is_400(self, client):
        alice = await register(client, "alice")
        res = await client.post(
            "/api/ai/generate-caption", json={"imageDescription": ""}, headers=alice["headers"]
        )
        assert res.status_code == 400
        assert res.json() == {"success": False, "message": "Image description is required"}

    async def test_requires_auth(self, client, fake_ai):
        res = await client.post("/api/ai/generate-caption", json={"imageDescription": "x"})
        assert res.status_code == 401
        assert fake_ai.calls == []

    async def test_provider_failure_is_500(self, client, app):
        class Broken:
            async def generate(self, prompt, base64_image=None):
                raise ExternalServiceError("AI provider returned 503")

        app.dependency_overrides[get_ai_client] = lambda: Broken()
        alice = await register(client, "alice")
        res = await client.post(
            "/api/ai/generate-caption", json={"imageDescription": "x"}, headers=alice["headers"]
        )
        assert res.status_code == 500
        assert res.json() == {"success": False, "message": "AI provider returned 503"}


class TestHealth:
    async def test_health(self, client):
        res = await client.get("/api/health")
        assert res.status_code == 200
        assert res.json() == {"ok": True, "database": "healthy"}
