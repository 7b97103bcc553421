import asyncio
import json

import httpx
import pytest

from src.models.services.google_vision import GoogleVisionOCR
from src.models.services.ocr_base import OcrRequest, OcrServiceError


def make_ocr(handler, api_key="test-key"):
    return GoogleVisionOCR(api_key=api_key, transport=httpx.MockTransport(handler))


class TestGoogleVisionOCR:
    def test_request_shape_and_text_extraction(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"responses": [{"fullTextAnnotation": {"text": "2+2=\n"}}]})

        text = asyncio.run(make_ocr(handler).extract_text("aGVsbG8="))

        assert text == "2+2=\n"
        assert seen["url"].params["key"] == "test-key"
        assert seen["url"].path == "/v1/images:annotate"
        assert seen["body"] == {
            "requests": [{
                "image": {"content": "aGVsbG8="},
                "features": [{"type": "TEXT_DETECTION"}],
            }]
        }

    @pytest.mark.parametrize("payload", [
        {},
        {"responses": []},
        {"responses": [{}]},
        {"responses": [{"fullTextAnnotation": {}}]},
        {"responses": [{"fullTextAnnotation": {"text": ""}}]},
    ])
    def test_missing_annotation_is_empty_text(self, payload):
        ocr = make_ocr(lambda request: httpx.Response(200, json=payload))
        assert asyncio.run(ocr.extract_text("abc")) == ""

    def test_error_status_is_wrapped(self):
        ocr = make_ocr(lambda request: httpx.Response(403, json={"error": {"message": "denied"}}))
        with pytest.raises(OcrServiceError):
            asyncio.run(ocr.extract_text("abc"))

    def test_transport_error_is_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(OcrServiceError):
            asyncio.run(make_ocr(handler).extract_text("abc"))

    def test_per_image_error_is_wrapped(self):
        payload = {"responses": [{"error": {"code": 3, "message": "Bad image data."}}]}
        ocr = make_ocr(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(OcrServiceError):
            asyncio.run(ocr.extract_text("abc"))

    def test_undecodable_body_is_wrapped(self):
        ocr = make_ocr(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
        with pytest.raises(OcrServiceError):
            asyncio.run(ocr.extract_text("abc"))

    @pytest.mark.parametrize("payload", [
        [],
        "x",
        None,
        {"responses": ["oops"]},
        {"responses": "oops"},
    ])
    def test_unexpected_body_shape_is_wrapped(self, payload):
        ocr = make_ocr(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(OcrServiceError, match="unexpected body"):
            asyncio.run(ocr.extract_text("abc"))

    def test_non_string_text_is_empty(self):
        payload = {"responses": [{"fullTextAnnotation": {"text": 42}}]}
        ocr = make_ocr(lambda request: httpx.Response(200, json=payload))
        assert asyncio.run(ocr.extract_text("abc")) == ""

    def test_missing_key_fails_without_request(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_VISION_API_KEY", raising=False)
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        ocr = GoogleVisionOCR(transport=httpx.MockTransport(handler))
        with pytest.raises(OcrServiceError):
            asyncio.run(ocr.extract_text("abc"))
        assert calls == []
        assert asyncio.run(ocr.health_check()) is False

    def test_key_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_VISION_API_KEY", "env-key")
        ocr = GoogleVisionOCR()
        assert ocr.api_key == "env-key"
        assert asyncio.run(ocr.health_check()) is True

    def test_language_hints_are_forwarded(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"responses": [{"fullTextAnnotation": {"text": "x"}}]})

        response = asyncio.run(make_ocr(handler).ocr(OcrRequest(content="abc", language_hints=["en"])))
        assert response.text == "x"
        assert response.meta["status_code"] == 200
        assert seen["body"]["requests"][0]["imageContext"] == {"languageHints": ["en"]}
