from __future__ import annotations
from typing import Any, Dict
import time
import httpx
from ollama import Client, ResponseError
from .base import ModelProvider, ChatRequest, ModelResponse, ModelError, ModelTimeout


class OllamaProvider(ModelProvider):
    """Local fallback for the solve task, e.g. when developing without a Gemini key."""

    def __init__(self, host: str = "http://localhost:11434", request_timeout_s: float = 300, keep_alive: str = "5m"):
        self.client = Client(host=host, timeout=request_timeout_s)
        self.keep_alive = keep_alive
        self.host = host
        self.request_timeout_s = request_timeout_s

    def chat(self, req: ChatRequest) -> ModelResponse:
        options = dict(req.params or {})
        keep_alive = options.pop('keep_alive', self.keep_alive)

        custom_timeout = options.pop('timeout', self.request_timeout_s)
        client = Client(host=self.host, timeout=custom_timeout) if custom_timeout != self.request_timeout_s else self.client

        t0 = time.perf_counter()

        try:
            response = client.chat(
                model=req.model,
                messages=req.messages,
                options=options,
                keep_alive=keep_alive
            )
        except httpx.TimeoutException as e:
            raise ModelTimeout(f"Ollama timeout after {custom_timeout}s: {e}") from e
        except ResponseError as e:
            raise ModelError(str(e)) from e
        except Exception as e:
            raise ModelError(f"Ollama request failed: {e}") from e

        dt = time.perf_counter() - t0

        # the client returns either a plain dict or a ChatResponse object
        raw_response_dict: Dict[str, Any] = {}
        if isinstance(response, dict):
            raw_response_dict = response
            message = response.get('message') or {}
            content = message.get('content', '') if isinstance(message, dict) else ''
            model_name = response.get('model', req.model)
        elif hasattr(response, 'message') and hasattr(response.message, 'content'):
            content = response.message.content or ''
            model_name = getattr(response, 'model', req.model)
            if hasattr(response, 'model_dump'):
                raw_response_dict = response.model_dump()
        else:
            raise ModelError(f"Received unexpected response structure from Ollama: {response}")

        meta = {"provider": "ollama", "model": model_name, "latency": dt}
        for key in ['total_duration', 'load_duration', 'prompt_eval_count', 'eval_count', 'eval_duration']:
            if raw_response_dict.get(key) is not None:
                meta[key] = raw_response_dict[key]

        return ModelResponse(content=content, raw=response, meta=meta)

    def health_check(self) -> bool:
        try:
            self.client.list()
            return True
        except Exception:
            return False
