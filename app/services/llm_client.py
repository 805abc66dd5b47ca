"""Thin Bedrock client wrapper for the language and vision capabilities."""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Awaitable, Callable, Optional

from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from app.config.settings import BedrockConfig, settings
from app.services.aws import create_boto3_client

logger = logging.getLogger(__name__)

_THROTTLING_CODES = frozenset(
    {"ThrottlingException", "TooManyRequestsException", "ServiceQuotaExceededException"}
)

_IMAGE_FORMATS = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/gif": "gif",
    "image/webp": "webp",
}


class LlmInvocationError(RuntimeError):
    """Raised when the Bedrock invocation fails."""


def _decode_bedrock_api_key(secret_value: Optional[str]) -> tuple[str, str] | None:
    """Decode the BEDROCK_API_KEY secret into access/secret key components."""

    if not secret_value:
        return None

    try:
        decoded_bytes = base64.b64decode(secret_value.strip(), validate=True)
    except ValueError:
        decoded_bytes = secret_value.encode("utf-8", "ignore")

    filtered = "".join(chr(b) for b in decoded_bytes if 31 < b < 127)
    if ":" not in filtered:
        return None
    access_key, secret_key = filtered.split(":", 1)
    return access_key, secret_key


def _is_throttling(exc: Exception) -> bool:
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code", "")
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        return code in _THROTTLING_CODES or status == 429
    return False


def image_format_for(mime_type: str) -> str:
    """Map a MIME type to the Bedrock image block format."""

    try:
        return _IMAGE_FORMATS[(mime_type or "").lower()]
    except KeyError:
        raise LlmInvocationError(f"Unsupported image type for vision: {mime_type}") from None


class BedrockLlmClient:
    """Invoke Amazon Bedrock models with standard configuration.

    Throttled calls are retried with exponential backoff
    (``base_delay_seconds * 2**attempt`` capped at ``max_delay_seconds``);
    every other error surfaces immediately as :class:`LlmInvocationError`.
    """

    def __init__(
        self,
        config: Optional[BedrockConfig] = None,
        client: Any = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or settings.bedrock
        self._sleep = sleep

        if client is not None:
            self._client = client
            return

        api_key_tuple = None
        if self._config.api_key:
            api_key_tuple = _decode_bedrock_api_key(
                self._config.api_key.get_secret_value()
            )

        try:
            self._client = create_boto3_client(
                "bedrock-runtime",
                region_name=self._config.region,
                aws_access_key_id=api_key_tuple[0] if api_key_tuple else None,
                aws_secret_access_key=api_key_tuple[1] if api_key_tuple else None,
                client_config=Config(retries={"max_attempts": 1, "mode": "standard"}),
            )
        except BotoCoreError as exc:  # pragma: no cover - configuration issue
            logger.warning("Could not initialise Bedrock client: %s", exc)
            self._client = None

    async def complete(self, prompt: str, *, system_prompt: str | None = None) -> str:
        """Send a text prompt to the language model and return its text output."""

        return await self._converse(
            model_id=self._config.model_id,
            content=[{"text": prompt}],
            system_prompt=system_prompt,
        )

    async def describe_image(
        self,
        image_bytes: bytes,
        mime_type: str,
        *,
        prompt: str,
    ) -> str:
        """Send an image plus instructions to the vision model."""

        image_block = {
            "image": {
                "format": image_format_for(mime_type),
                "source": {"bytes": image_bytes},
            }
        }
        return await self._converse(
            model_id=self._config.vision_model_id,
            content=[image_block, {"text": prompt}],
        )

    async def _converse(
        self,
        *,
        model_id: str,
        content: list[dict[str, Any]],
        system_prompt: str | None = None,
    ) -> str:
        if not self._client or not model_id:
            raise LlmInvocationError("Bedrock client is not configured.")

        request: dict[str, Any] = {
            "modelId": model_id,
            "messages": [{"role": "user", "content": content}],
            "inferenceConfig": {
                "maxTokens": self._config.max_tokens,
                "temperature": self._config.temperature,
                "topP": self._config.top_p,
            },
        }
        if system_prompt:
            request["system"] = [{"text": system_prompt}]

        def _call() -> str:
            response = self._client.converse(**request)
            content_blocks = (
                response.get("output", {})
                .get("message", {})
                .get("content", [])
            )
            texts = [block.get("text", "") for block in content_blocks if block.get("text")]
            return "\n".join(texts).strip()

        attempts = self._config.max_attempts
        for attempt in range(attempts):
            try:
                result = await run_in_threadpool(_call)
            except (BotoCoreError, ClientError) as exc:
                if not _is_throttling(exc) or attempt == attempts - 1:
                    raise LlmInvocationError(str(exc)) from exc
                delay = min(
                    self._config.base_delay_seconds * (2 ** attempt),
                    self._config.max_delay_seconds,
                )
                logger.warning(
                    "Bedrock throttled (attempt %s/%s), retrying in %.1fs",
                    attempt + 1,
                    attempts,
                    delay,
                )
                await self._sleep(delay)
                continue

            if not result:
                raise LlmInvocationError("Bedrock returned an empty response.")
            return result

        raise LlmInvocationError("Bedrock retries exhausted.")


__all__ = ["BedrockLlmClient", "LlmInvocationError", "image_format_for"]
