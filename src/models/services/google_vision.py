#extracts plain text from an image with the google cloud vision annotate endpoint
from __future__ import annotations
from typing import Any, Dict, Optional
from os import getenv
import logging
import time

import httpx

from .ocr_base import OcrEngine, OcrRequest, OcrResponse, OcrServiceError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"


class GoogleVisionOCR(OcrEngine):
    def __init__(self, endpoint: str = DEFAULT_ENDPOINT, api_key: Optional[str] = None, api_key_env: str = "GOOGLE_VISION_API_KEY", timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.endpoint = endpoint
        self.api_key = api_key or getenv(api_key_env)
        self.api_key_env = api_key_env
        # None keeps the transport default
        self.timeout = timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT
        self._transport = transport

    def _build_payload(self, req: OcrRequest) -> Dict[str, Any]:
        request: Dict[str, Any] = {
            "image": {"content": req.content},
            "features": [{"type": feature} for feature in req.features],
        }
        if req.language_hints:
            request["imageContext"] = {"languageHints": list(req.language_hints)}
        if req.extra:
            request.update(req.extra)
        return {"requests": [request]}

    @staticmethod
    def _first_text(payload: Any) -> str:
        if not isinstance(payload, dict):
            raise OcrServiceError("Vision API returned an unexpected body")
        responses = payload.get("responses") or []
        if not isinstance(responses, list):
            raise OcrServiceError("Vision API returned an unexpected body")
        if not responses:
            return ""
        first = responses[0] or {}
        if not isinstance(first, dict):
            raise OcrServiceError("Vision API returned an unexpected body")
        if first.get("error"):
            # per-image failures come back inside a 200 response
            raise OcrServiceError(f"Vision API image error: {first['error']}")
        annotation = first.get("fullTextAnnotation") or {}
        text = annotation.get("text") if isinstance(annotation, dict) else None
        return text if isinstance(text, str) else ""

    async def ocr(self, req: OcrRequest) -> OcrResponse:
        if not self.api_key:
            raise OcrServiceError(f"Missing Vision API key (set {self.api_key_env})")

        t0 = time.perf_counter()
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    self.endpoint,
                    params={"key": self.api_key},
                    json=self._build_payload(req),
                    headers={"Content-Type": "application/json"},
                    timeout=self.timeout,
                )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Vision API returned {e.response.status_code}: {e.response.text[:500]}")
            raise OcrServiceError(f"Vision API error status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Vision API transport error: {e!r}")
            raise OcrServiceError(f"Vision API request failed: {e}") from e
        except ValueError as e:
            raise OcrServiceError(f"Vision API returned an undecodable body: {e}") from e

        latency = time.perf_counter() - t0
        text = self._first_text(payload)
        meta = {"latency": latency, "status_code": response.status_code, "endpoint": self.endpoint}
        logger.info(f"Vision OCR finished in {latency:.2f}s, {len(text)} chars detected")
        return OcrResponse(text=text, raw=payload, meta=meta)

    async def health_check(self) -> bool:
        # a real annotate call costs quota, so only credentials are checked
        return bool(self.api_key)
