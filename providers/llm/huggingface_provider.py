"""
Hugging Face Inference text-generation provider.

Sends one instruction-style prompt to a hosted model (Mistral-7B-Instruct by
default) and returns the generated continuation only (no prompt echo).
The access token is read server-side from HF_TOKEN and never reaches clients.
"""

import logging
import os
import time
from typing import Any, Dict, Optional

from providers.llm.base import LLMError, LLMProvider, LLMResponse
from providers.registry import ProviderType, registry

logger = logging.getLogger(__name__)


class HuggingFaceProvider(LLMProvider):
    """Hugging Face text generation via huggingface_hub.InferenceClient."""

    provider_id = "huggingface"
    DEFAULT_MODEL = "mistralai/Mistral-7B-Instruct-v0.1"

    def __init__(self, config: Dict[str, Any] = None) -> None:
        super().__init__(config)
        self.api_token = self._resolve_api_token()
        self.default_model = self._config.get("default_model", self.DEFAULT_MODEL)
        self.timeout = self._config.get("timeout", 60)

    def _resolve_api_token(self) -> str:
        token = self._config.get("api_token", "")
        # Skip unresolved ${HF_TOKEN} placeholder
        if token and not token.startswith("${"):
            return token
        return os.getenv("HF_TOKEN", "")

    def get_default_model(self) -> str:
        return self.default_model

    def generation_parameters(self, **overrides) -> Dict[str, Any]:
        """Return the generation parameters, config values first then overrides."""
        params = {
            "max_new_tokens": self._config.get("max_new_tokens", 200),
            "temperature": self._config.get("temperature", 0.3),
            "do_sample": self._config.get("do_sample", True),
            "return_full_text": self._config.get("return_full_text", False),
        }
        params.update({k: v for k, v in overrides.items() if k in params})
        return params

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        **kwargs,
    ) -> LLMResponse:
        if not self.api_token:
            raise self.unavailable("HF_TOKEN not set")

        from huggingface_hub import InferenceClient

        model = model or self.default_model
        params = self.generation_parameters(**kwargs)

        start = time.time()
        try:
            client = InferenceClient(token=self.api_token, timeout=self.timeout)
            generated = client.text_generation(prompt, model=model, **params)
        except Exception as exc:
            raise LLMError("huggingface", f"Text generation failed: {exc}") from exc

        latency_ms = (time.time() - start) * 1000
        logger.info("Generated %d chars with %s in %.0f ms", len(generated or ""), model, latency_ms)

        return LLMResponse(
            content=generated or "",
            model=model,
            provider="huggingface",
            latency_ms=latency_ms,
            raw_response=generated,
        )

    def is_available(self) -> bool:
        return bool(self.api_token)

    def get_info(self) -> Dict[str, Any]:
        info = super().get_info()
        info["name"] = self._config.get("name", "Hugging Face Inference")
        info["model"] = self.default_model
        return info


# Auto-register when this module is imported
registry.register(ProviderType.LLM, "huggingface", HuggingFaceProvider)
