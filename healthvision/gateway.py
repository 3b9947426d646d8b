import asyncio
import base64
from dataclasses import dataclass
from typing import Optional

import openai
from loguru import logger

from healthvision.errors import GatewayError


@dataclass(frozen=True)
class ImagePayload:
    data: bytes
    mime_type: str

    def as_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class ModelGateway:
    """Pass-through to an OpenAI-compatible chat completion API.

    Returns raw reply text; every failure surfaces as ``GatewayError``.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o",
        vision_model: str = "gpt-4o",
        base_url: Optional[str] = None,
        timeout: float = 20.0,
    ):
        self.api_key = api_key
        self.model = model
        self.vision_model = vision_model
        self.base_url = base_url
        self.timeout = timeout
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> "openai.AsyncOpenAI":
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def complete(
        self,
        prompt: str,
        image: Optional[ImagePayload] = None,
        *,
        max_tokens: int = 1200,
        temperature: float = 0.1,
    ) -> str:
        if not self.configured:
            raise GatewayError("No API key configured")

        if image is not None:
            model = self.vision_model
            content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image.as_data_url()}},
            ]
        else:
            model = self.model
            content = prompt

        try:
            resp = await asyncio.wait_for(
                self._get_client().chat.completions.create(
                    model=model,
                    messages=[{"role": "user", "content": content}],
                    temperature=temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise GatewayError(f"{model} timed out after {self.timeout}s") from e
        except openai.OpenAIError as e:
            raise GatewayError(f"{model} call failed: {e}") from e

        try:
            text = resp.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise GatewayError(f"{model} returned no choices") from e
        if not text or not text.strip():
            raise GatewayError(f"{model} returned an empty reply")

        logger.info("Received {} chars from {}: {}", len(text), model, text[:200])
        return text.strip()
