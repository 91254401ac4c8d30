# Hugging Face Inference API provider for CulturalBot
# Zero-shot intent classification and short query generation.
# Optional: without HUGGINGFACE_TOKEN both callers fall back to keyword logic.

from typing import Any, List, Optional, Tuple

from cultural_bot.models import FetchResult
from cultural_bot.providers.base import Provider, ProviderMetadata, ProviderResponseError
from cultural_bot.providers.utils import http_post_json


class AIProvider(Provider):
    """Hosted zero-shot classifier and text generator."""

    def __init__(
        self,
        config,
        timeout: float = 30.0,
        session=None,
        classification_model: str = "facebook/bart-large-mnli",
        generation_model: str = "microsoft/DialoGPT-medium",
    ):
        super().__init__(config, timeout=timeout, session=session)
        self.classification_model = classification_model
        self.generation_model = generation_model

        if not self.enabled:
            self.logger.warning("HUGGINGFACE_TOKEN not configured - AI provider will be disabled")

    async def get_metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="huggingface",
            version="1.0.0",
            description="Hugging Face Inference API",
            capabilities=["zero_shot_classification", "text_generation"],
        )

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, model: str, payload: dict) -> Any:
        return await http_post_json(
            f"{self.config.base_url}/models/{model}",
            json_data=payload,
            headers=self._headers(),
            timeout=self.timeout,
            session=self.session,
            provider_name=self.name,
        )

    async def classify(self, text: str, labels: List[str]) -> FetchResult[Tuple[str, float]]:
        """Return the top (label, score) for `text` among `labels`."""
        self._require_enabled()
        data = await self._post(self.classification_model, {
            "inputs": text,
            "parameters": {"candidate_labels": labels},
        })
        if isinstance(data, list) and data:
            data = data[0]
        if not isinstance(data, dict):
            raise ProviderResponseError("Unexpected classification payload", provider_name=self.name)

        result_labels = data.get("labels") or []
        scores = data.get("scores") or []
        if not result_labels or not scores:
            return FetchResult.empty()
        return FetchResult.ok((result_labels[0], float(scores[0])))

    async def generate(self, prompt: str, max_new_tokens: int = 150, temperature: float = 0.2) -> FetchResult[str]:
        """Return freeform text generated for `prompt`."""
        self._require_enabled()
        data = await self._post(self.generation_model, {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": max_new_tokens,
                "temperature": temperature,
                "return_full_text": False,
            },
        })
        text: Optional[str] = None
        if isinstance(data, list) and data and isinstance(data[0], dict):
            text = data[0].get("generated_text")
        elif isinstance(data, dict):
            text = data.get("generated_text")
        if not text or not text.strip():
            return FetchResult.empty()
        return FetchResult.ok(text)
