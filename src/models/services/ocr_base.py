from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class OcrServiceError(RuntimeError):
    """Transport or service failure while talking to an OCR backend."""


@dataclass(frozen=True)
class OcrRequest:
    content: str  # base64 encoded image bytes
    features: List[str] = field(default_factory=lambda: ["TEXT_DETECTION"])
    language_hints: Optional[List[str]] = None
    extra: Dict[str, Any] | None = None

@dataclass(frozen=True)
class OcrResponse:
    text: str              # full detected text, "" when nothing was found
    raw: Any               # service native payload
    meta: Dict[str, Any]   # timings, status codes, endpoint

class OcrEngine:
    async def health_check(self) -> bool: raise NotImplementedError
    async def ocr(self, req: OcrRequest) -> OcrResponse: raise NotImplementedError

    async def extract_text(self, encoded_image: str) -> str:
        response = await self.ocr(OcrRequest(content=encoded_image))
        return response.text
