"""
LLM Client: Remote Content Generator backed by the Mistral chat API.
Returns a title and Markdown body, or an explicit, classified error string.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from mistralai import Mistral

from storefront_content_system.core.models import GenerationRequest, GenerationResponse
from storefront_content_system.logic_blocks.error_block import classify_error, user_message
from storefront_content_system.logic_blocks.prompt_block import GENERATOR_SYSTEM_PROMPT

logger = logging.getLogger("LLMClient")


_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_BRACED_JSON = re.compile(r"\{[\s\S]*\}")


def parse_json_object(text: str) -> Dict[str, Any]:
    """
    Parse the model's JSON reply.

    JSON mode usually returns a bare object, but some models still wrap it
    in a code fence or add prose around it.
    """
    candidates = [text]
    for pattern, group in ((_FENCED_JSON, 1), (_BRACED_JSON, 0)):
        match = pattern.search(text)
        if match:
            candidates.append(match.group(group))

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    logger.error(f"No JSON object in model reply: {text[:200]}")
    raise ValueError(f"Could not parse JSON from LLM response: {text[:100]}...")


class ContentGenerator(ABC):
    """
    Remote Content Generator contract.

    generate() never raises: transport and model failures come back as
    GenerationResponse.error.
    """

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        pass


class MistralContentGenerator(ContentGenerator):
    """Mistral chat completion in JSON mode."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "mistral-small-latest",
        temperature: float = 0.5,
        max_tokens: Optional[int] = None,
        client: Optional[Mistral] = None,
    ):
        """
        Args:
            api_key: Mistral API key
            model: Model name
            temperature: Sampling temperature (0-1)
            max_tokens: Optional response cap
            client: Pre-built client, mainly for tests
        """
        self.model_name = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = client
        self._api_key = api_key

        logger.info(f"Content generator initialized with {self.model_name}")

    def _get_client(self) -> Mistral:
        if self._client is None:
            if not self._api_key:
                raise PermissionError("API key not valid: MISTRAL_API_KEY is not set")
            self._client = Mistral(api_key=self._api_key)
        return self._client

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        try:
            client = self._get_client()
            response = await client.chat.complete_async(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": GENERATOR_SYSTEM_PROMPT},
                    {"role": "user", "content": request.prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
            raw = response.choices[0].message.content
            if not isinstance(raw, str):
                raw = "".join(getattr(chunk, "text", "") for chunk in raw or [])

            logger.debug(f"Generated {len(raw)} chars")
            data = parse_json_object(raw)
        except Exception as e:
            logger.error(f"Error generating document content: {e}")
            return GenerationResponse(error=user_message(classify_error(str(e)), str(e)))

        content = data.get("content") or ""
        title = data.get("title") or ""
        if not content:
            return GenerationResponse(
                error="The AI model did not return any content. Please try again with a different prompt."
            )
        return GenerationResponse(title=str(title), content=str(content))
