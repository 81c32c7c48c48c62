"""OpenAI-compatible ChatCompletion client wrapper."""

from typing import Any, Dict, List, Optional, cast

from openai import NOT_GIVEN, OpenAI

from dealscout.agents.lib_agent.base_llm import BaseLLM
from dealscout.configs import Settings, settings as default_settings


class OpenAILLM(BaseLLM):
    """Wrapper around the OpenAI client pointed at any compatible endpoint."""

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        settings: Settings = default_settings,
    ) -> None:
        """Initialize the client from explicit values or the app settings."""
        self.model = model or settings.LLM_MODEL
        self._api_key = api_key or settings.OPENAI_API_KEY
        self.base_url = base_url or settings.LLM_BASE_URL
        if self.base_url:
            self.client = OpenAI(api_key=self._api_key, base_url=self.base_url)
        else:
            self.client = OpenAI(api_key=self._api_key)

    def complete(
        self,
        messages: List[Dict[str, Any]],
        response_format: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Call chat completions and return only the content string."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=cast(Any, messages),
            response_format=cast(Any, response_format) if response_format else NOT_GIVEN,
        )
        return response.choices[0].message.content or ""
