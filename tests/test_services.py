import base64
import io
import json
import urllib.error
import urllib.parse

import pytest

from playful_environment.core.compositor import CompositeMode, ConceptPayload
from playful_environment.services import http_client
from playful_environment.services.concept_service import ConceptImageService
from playful_environment.services.describe_service import ImageDescriptionService
from playful_environment.services.gemini_client import GeminiClient, pick_candidate, pick_image_part
from playful_environment.services.geocode_service import GeocodeResult, ReverseGeocoder
from playful_environment.services.http_client import ServiceError, ServiceErrorKind, build_url, request_json
from playful_environment.services.prompt_service import PromptSuggestionService, truncate_words
from playful_environment.utils.image_utils import encode_qimage, to_data_url

from conftest import solid_image

IMAGE_URL = "data:image/png;base64,iVBORw0KGgo="


class FakeResponse:
    def __init__(self, body):
        self._body = body if isinstance(body, bytes) else json.dumps(body).encode('utf-8')

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def fake_http(monkeypatch):
    """Replace urlopen; set `.response` to a dict, bytes or an exception."""

    class Recorder:
        response = {}
        requests = []

        def __call__(self, req, timeout=None):
            self.requests.append(req)
            if isinstance(self.response, Exception):
                raise self.response
            return FakeResponse(self.response)

        @property
        def last(self):
            return self.requests[-1]

        def last_json(self):
            return json.loads(self.last.data.decode('utf-8'))

    recorder = Recorder()
    recorder.requests = []
    monkeypatch.setattr(http_client.urllib.request, "urlopen", recorder)
    return recorder


def http_error(code, body=b'{"error": "nope"}'):
    return urllib.error.HTTPError("https://example.test", code, "error", hdrs=None, fp=io.BytesIO(body))


# ==================== http_client ====================

def test_request_json_get_and_post(fake_http):
    fake_http.response = {"ok": True}

    assert request_json("https://example.test/a") == {"ok": True}
    assert fake_http.last.get_method() == 'GET'

    request_json("https://example.test/b", payload={"x": 1}, headers={"Authorization": "Bearer k"})
    assert fake_http.last.get_method() == 'POST'
    assert fake_http.last_json() == {"x": 1}
    assert fake_http.last.get_header('Authorization') == 'Bearer k'


def test_request_json_maps_http_error(fake_http):
    fake_http.response = http_error(502)

    with pytest.raises(ServiceError) as info:
        request_json("https://example.test", error_message="Boom")

    assert info.value.kind == ServiceErrorKind.UPSTREAM_STATUS
    assert info.value.status == 502
    assert info.value.message == "Boom"
    assert info.value.detail == {"error": "nope"}


def test_request_json_maps_network_error(fake_http):
    fake_http.response = urllib.error.URLError("unreachable")

    with pytest.raises(ServiceError) as info:
        request_json("https://example.test")
    assert info.value.kind == ServiceErrorKind.NETWORK


@pytest.mark.parametrize('body', [b'not json', b'[1, 2]'])
def test_request_json_rejects_non_object_bodies(fake_http, body):
    fake_http.response = body

    with pytest.raises(ServiceError) as info:
        request_json("https://example.test")
    assert info.value.kind == ServiceErrorKind.EMPTY_RESPONSE


def test_build_url_keeps_existing_query():
    url = build_url("https://example.test/path?a=1", {"b": "two words"})
    assert urllib.parse.parse_qs(urllib.parse.urlsplit(url).query) == {"a": ["1"], "b": ["two words"]}
    assert build_url("https://example.test", None) == "https://example.test"


# ==================== Prompt suggestions ====================

def test_truncate_words():
    assert truncate_words("one  two three", 2) == "one two"


def test_suggest_sends_chat_request_and_truncates(fake_http):
    words = ' '.join(f"w{i}" for i in range(50))
    fake_http.response = {"choices": [{"message": {"content": f"  {words}  "}}]}
    service = PromptSuggestionService("sk-test", word_limit=35)

    text = service.suggest("Add a splash area")

    assert len(text.split()) == 35
    body = fake_http.last_json()
    assert body["temperature"] == 0.6
    assert body["messages"][1] == {"role": "user", "content": "Add a splash area"}
    assert fake_http.last.get_header('Authorization') == 'Bearer sk-test'


def test_suggest_without_key_never_calls_out(fake_http):
    with pytest.raises(ServiceError) as info:
        PromptSuggestionService("").suggest("anything")
    assert info.value.kind == ServiceErrorKind.NOT_CONFIGURED
    assert fake_http.requests == []


def test_suggest_empty_prompt_is_bad_request(fake_http):
    with pytest.raises(ServiceError) as info:
        PromptSuggestionService("sk").suggest("   ")
    assert info.value.kind == ServiceErrorKind.BAD_REQUEST


def test_suggest_empty_content(fake_http):
    fake_http.response = {"choices": [{"message": {"content": "  "}}]}
    with pytest.raises(ServiceError) as info:
        PromptSuggestionService("sk").suggest("idea")
    assert info.value.kind == ServiceErrorKind.EMPTY_RESPONSE


def test_suggest_upstream_failure_uses_generic_message(fake_http):
    fake_http.response = http_error(500)
    with pytest.raises(ServiceError) as info:
        PromptSuggestionService("sk").suggest("idea")
    assert info.value.message == PromptSuggestionService.GENERIC_ERROR


# ==================== Gemini ====================

def text_response(text, finish="STOP"):
    return {"candidates": [{"finishReason": finish, "content": {"parts": [{"text": text}]}}]}


def test_pick_candidate_prefers_finished():
    response = {"candidates": [
        {"finishReason": "SAFETY", "content": {}},
        {"finishReason": "STOP", "content": {"parts": [{"text": "ok"}]}},
    ]}
    assert pick_candidate(response)["finishReason"] == "STOP"
    assert pick_candidate({"candidates": [{"finishReason": "OTHER"}]}) == {"finishReason": "OTHER"}
    assert pick_candidate({}) is None


def test_pick_image_part_accepts_both_casings():
    camel = {"content": {"parts": [{"text": "hi"}, {"inlineData": {"mimeType": "image/webp", "data": "QQ=="}}]}}
    snake = {"content": {"parts": [{"inline_data": {"mime_type": "image/png", "data": "QQ=="}}]}}

    assert pick_image_part(camel) == {"data": "QQ==", "mime_type": "image/webp"}
    assert pick_image_part(snake) == {"data": "QQ==", "mime_type": "image/png"}
    assert pick_image_part({"content": {"parts": [{"inlineData": {"mimeType": "text/plain", "data": "QQ=="}}]}}) is None


def test_describe_sends_image_and_key(fake_http):
    fake_http.response = text_response("  A shaded courtyard.  ")
    service = ImageDescriptionService(GeminiClient("g-key", "vision-model"))

    assert service.describe(IMAGE_URL) == "A shaded courtyard."

    url = urllib.parse.urlsplit(fake_http.last.full_url)
    assert url.path.endswith("/models/vision-model:generateContent")
    assert urllib.parse.parse_qs(url.query) == {"key": ["g-key"]}
    parts = fake_http.last_json()["contents"][0]["parts"]
    assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": "iVBORw0KGgo="}}
    assert fake_http.last_json()["generationConfig"]["maxOutputTokens"] == 200


def test_describe_rejects_non_data_url(fake_http):
    service = ImageDescriptionService(GeminiClient("g-key", "m"))
    with pytest.raises(ServiceError) as info:
        service.describe("https://example.test/photo.jpg")
    assert info.value.kind == ServiceErrorKind.BAD_REQUEST
    assert fake_http.requests == []


def test_describe_without_key(fake_http):
    with pytest.raises(ServiceError) as info:
        ImageDescriptionService(GeminiClient("", "m")).describe(IMAGE_URL)
    assert info.value.kind == ServiceErrorKind.NOT_CONFIGURED


def test_describe_empty_text(fake_http):
    fake_http.response = text_response("   ")
    with pytest.raises(ServiceError) as info:
        ImageDescriptionService(GeminiClient("k", "m")).describe(IMAGE_URL)
    assert info.value.kind == ServiceErrorKind.EMPTY_RESPONSE


# ==================== Concept images ====================

def test_build_parts_validates_mode_inputs():
    service = ConceptImageService(GeminiClient("k", "m"))

    with pytest.raises(ServiceError):
        service.build_parts("", ConceptPayload(CompositeMode.COMPOSITE, image_data=IMAGE_URL))
    with pytest.raises(ServiceError):
        service.build_parts("prompt", ConceptPayload(CompositeMode.COMPOSITE))
    with pytest.raises(ServiceError):
        service.build_parts("prompt", ConceptPayload(CompositeMode.INPAINTING, base_image_data=IMAGE_URL))

    composite = service.build_parts("prompt", ConceptPayload(CompositeMode.COMPOSITE, image_data=IMAGE_URL))
    assert len(composite) == 3
    inpainting = service.build_parts(
        "prompt",
        ConceptPayload(CompositeMode.INPAINTING, base_image_data=IMAGE_URL, mask_data=IMAGE_URL),
    )
    assert len(inpainting) == 4
    assert "white pixels" in inpainting[-1]["text"]


def test_generate_returns_decodable_image(fake_http):
    png = base64.b64encode(encode_qimage(solid_image(8, 6), "PNG")).decode('ascii')
    fake_http.response = {"candidates": [{"finishReason": "STOP", "content": {"parts": [
        {"text": "Here you go"},
        {"inlineData": {"mimeType": "image/png", "data": png}},
    ]}}]}
    service = ConceptImageService(GeminiClient("k", "image-model"))
    payload = ConceptPayload(CompositeMode.COMPOSITE, image_data=to_data_url(solid_image(4, 4)))

    result = service.generate("Add a swing", payload)

    assert result.mime_type == "image/png"
    assert result.data_url.startswith("data:image/png;base64,")
    image = result.to_qimage()
    assert (image.width(), image.height()) == (8, 6)


def test_generate_without_image_part(fake_http):
    fake_http.response = text_response("I cannot do that")
    service = ConceptImageService(GeminiClient("k", "m"))

    with pytest.raises(ServiceError) as info:
        service.generate("prompt", ConceptPayload(CompositeMode.COMPOSITE, image_data=IMAGE_URL))
    assert info.value.kind == ServiceErrorKind.EMPTY_RESPONSE


# ==================== Reverse geocoding ====================

def test_reverse_geocode(fake_http):
    fake_http.response = {
        "display_name": "Rua X, Alfama, Lisboa, Portugal",
        "address": {"suburb": "Alfama", "country": "Portugal"},
        "lat": "38.71",
        "lon": "-9.13",
    }
    geocoder = ReverseGeocoder("https://geo.test/reverse", "tests/1.0")

    result = geocoder.reverse(38.71, -9.13)

    assert result.short_name() == "Alfama, Portugal"
    query = urllib.parse.parse_qs(urllib.parse.urlsplit(fake_http.last.full_url).query)
    assert query["format"] == ["jsonv2"]
    assert query["zoom"] == ["14"]
    assert fake_http.last.get_header('User-agent') == "tests/1.0"


def test_reverse_geocode_requires_coordinates(fake_http):
    with pytest.raises(ServiceError) as info:
        ReverseGeocoder().reverse(None, 1.0)
    assert info.value.kind == ServiceErrorKind.BAD_REQUEST


def test_short_name_falls_back_to_display_name():
    assert GeocodeResult(display_name="Somewhere").short_name() == "Somewhere"
