from __future__ import annotations
from typing import Optional, Dict, Any, List, Union
from pathlib import Path
from dataclasses import dataclass, field
from enum import Enum
import yaml
import time
import logging
import threading
from contextlib import contextmanager

from .prompts import PromptManager
from .providers.base import ChatRequest, ModelResponse
from .providers.ollama import OllamaProvider
from .providers.openai_sdk import OpenAIProvider
from .services.ocr_base import OcrEngine
from .services.google_vision import GoogleVisionOCR

logger = logging.getLogger(__name__)


class Provider(Enum):
    OLLAMA = "ollama"
    OPENAI = "openai"

class Service(Enum):
    GOOGLE_VISION = "google_vision" #text detection for uploaded images

@dataclass(frozen=True)
class TaskConfig:
    provider: str
    model: str
    params: Dict[str, Any] = field(default_factory=dict)
    prompt_ref: Optional[str] = None #e.g. "solver/solve@v1"
    timeout: Optional[float] = None


class ModelManager:
    def __init__(self, config_path: Union[Path, str], prompts_dir: Optional[Path] = None):
        self.config_path = Path(config_path)
        self.config = self._load_config()
        self._providers = {}
        self._stats = {} #performance tracking
        self._stats_lock = threading.Lock()

        if prompts_dir:
            self.prompts = PromptManager(prompts_dir)
        else:
            src_root = Path(__file__).parents[1]
            self.prompts = PromptManager(src_root.parent / "prompts")

        self._ocr = None #lazy load ocr service

    def _load_config(self) -> Dict:
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config not found: {self.config_path}")
        with open(self.config_path) as f:
            config = yaml.safe_load(f) or {}

        if 'providers' not in config:
            raise ValueError("Config missing 'providers'")
        if 'tasks' not in config:
            raise ValueError("Config missing 'tasks'")

        for task_name, task_cfg in config['tasks'].items():
            if 'provider' not in task_cfg:
                raise ValueError(f"Task '{task_name}' missing provider")
            if 'model' not in task_cfg:
                raise ValueError(f"Task '{task_name}' missing model")

            provider_name = task_cfg['provider']
            if provider_name not in config['providers']:
                raise ValueError(f"Task '{task_name}' references unknown provider '{provider_name}'")

        for service_name, service_cfg in (config.get('services') or {}).items():
            service_type = (service_cfg or {}).get('type')
            if service_type not in {s.value for s in Service}:
                raise ValueError(f"Service '{service_name}' has unknown type '{service_type}'")

        return config

    def task_config(self, task: str) -> TaskConfig:
        if task not in self.config["tasks"]:
            raise ValueError(f"Unknown task: {task}")
        cfg = self.config["tasks"][task]
        return TaskConfig(
            provider=cfg["provider"],
            model=cfg["model"],
            params=cfg.get("params") or {},
            prompt_ref=cfg.get("prompt_ref"),
            timeout=cfg.get("timeout"),
        )

    @property
    def ocr(self) -> OcrEngine:
        """Access the OCR service directly"""
        if self._ocr is None:
            services = self.config.get('services') or {}
            vision_config = services.get('vision')
            if not vision_config:
                raise ValueError("Config missing 'services.vision' for OCR")
            settings = vision_config.get('settings')
            if not isinstance(settings, dict):
                settings = {}
            self._ocr = GoogleVisionOCR(**settings)
            logger.info("initialized OCR service: vision")
        return self._ocr

    def _get_provider(self, provider_name: str):
        if provider_name in self._providers:
            return self._providers[provider_name]
        if provider_name not in self.config['providers']:
            raise ValueError(f"Unknown provider: {provider_name}")

        provider_cfg = self.config["providers"][provider_name]
        provider_type = provider_cfg["type"]
        settings = provider_cfg.get("settings") or {}

        if provider_type == Provider.OLLAMA.value:
            provider = OllamaProvider(**settings)
        elif provider_type == Provider.OPENAI.value:
            provider = OpenAIProvider(**settings)
        else:
            raise ValueError(f"Unknown provider type: {provider_type}")
        self._providers[provider_name] = provider
        logger.info(f"initialized provider: {provider_name}")
        return provider

    def _build_request(self, task_cfg: TaskConfig, task: str, variables: Dict[str, Any], prompt_ref: Optional[str], messages_override: Optional[List[Dict[str, str]]], params_override: Dict[str, Any]) -> ChatRequest:
        prompt_ref = prompt_ref or task_cfg.prompt_ref
        prompt_params: Dict[str, Any] = {}
        if messages_override:
            rendered = messages_override
            logger.debug(f"Using message override for task '{task}'")
        else:
            if not prompt_ref:
                raise ValueError(f"Task '{task}' has no prompt_ref and none was given")
            rendered = self.prompts.render(prompt_ref, variables)
            prompt_params = dict(self.prompts.load_prompt(prompt_ref).params)

        params = {**prompt_params, **task_cfg.params, **params_override}
        if task_cfg.timeout:
            params.setdefault("timeout", task_cfg.timeout)

        return ChatRequest(
            model=task_cfg.model,
            messages=rendered,
            params=params,
        )

    def call(self, task: str, variables: Dict[str, Any], prompt_ref: Optional[str] = None, messages_override: Optional[List[Dict[str, str]]] = None, **params_override) -> ModelResponse:
        start_time = time.perf_counter()
        task_cfg = self.task_config(task)

        try:
            request = self._build_request(task_cfg, task, variables, prompt_ref, messages_override, params_override)
            provider = self._get_provider(task_cfg.provider)
            response = provider.chat(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            self._track_stats(task, elapsed_ms, success=False)
            raise
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._track_stats(task, elapsed_ms, success=True)
        return response

    def _track_stats(self, task: str, latency_ms: float, success: bool):
        # calls run concurrently from worker threads
        with self._stats_lock:
            if task not in self._stats:
                self._stats[task] = {
                    'total_calls': 0,
                    'successful_calls': 0,
                    'failed_calls': 0,
                    'total_latency_ms': 0
                }

            stats = self._stats[task]
            stats['total_calls'] += 1
            if success:
                stats['successful_calls'] += 1
                stats['total_latency_ms'] += latency_ms
            else:
                stats['failed_calls'] += 1

    def get_stats(self, task: Optional[str] = None) -> Dict:
        with self._stats_lock:
            if task:
                return dict(self._stats.get(task, {}))
            return {name: dict(stats) for name, stats in self._stats.items()}

    def cleanup(self):
        for name, provider in self._providers.items():
            if hasattr(provider, 'cleanup'):
                try:
                    provider.cleanup()
                    logger.info(f"Cleaned up provider: {name}")
                except Exception as e:
                    logger.error(f"Cleanup failed for {name}: {e}")

        self._providers.clear()
        self._ocr = None

    @contextmanager
    def session(self):
        try:
            yield self
        finally:
            self.cleanup()
