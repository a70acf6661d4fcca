"""Single-call adapter to the generative model endpoint."""

import json
import logging
import re
from typing import Any, TypeVar

from openai import APIConnectionError, APIStatusError, AsyncOpenAI
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config import Settings, get_settings
from ..utils.file_handlers import Attachment
from .errors import ConfigurationError, ParseError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Opening fence with an optional language tag of any case
OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*")

SYSTEM_PROMPT = "You are a document parsing assistant. Return only valid JSON."


def strip_code_fences(text: str) -> str:
    """Remove a leading ``` fence (with any language tag) and a trailing ``` marker."""
    cleaned = OPENING_FENCE.sub("", text.strip(), count=1)
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _wraps_results(schema: type[BaseModel]) -> bool:
    return list(schema.model_fields) == ["results"]


def parse_model_output(text: str, schema: type[SchemaT]) -> SchemaT:
    """
    Decode a raw model response into ``schema``.

    A bare JSON array is wrapped as ``{"results": [...]}`` when the schema
    is a results wrapper.

    Raises:
        ParseError: If the text is not JSON after code-fence stripping
        ValidationError: If the JSON does not match the schema
    """
    cleaned = strip_code_fences(text)
    try:
        payload: Any = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse model response as JSON: {e}")
        raise ParseError(f"Failed to parse model response: {e}", raw_text=text) from e

    if isinstance(payload, list) and _wraps_results(schema):
        payload = {"results": payload}

    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        logger.error(f"Model response failed {schema.__name__} validation: {errors}")
        raise ValidationError(
            f"Model response does not match {schema.__name__}", errors=errors
        ) from e


class ModelGateway:
    """Send a prompt (and optional attachment) to the model and validate the reply."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: AsyncOpenAI | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            settings: Injected configuration. If None, uses cached settings.
            client: Pre-built OpenAI-compatible client (tests, custom transports)
        """
        self.settings = settings or get_settings()
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.settings.is_model_configured

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-load the OpenAI-compatible client."""
        if self._client is None:
            if not self.settings.is_model_configured:
                raise ConfigurationError("GOOGLE_GENERATIVE_AI_API_KEY is not set")
            self._client = AsyncOpenAI(
                api_key=self.settings.google_api_key,
                base_url=self.settings.model_base_url,
                max_retries=0,
            )
        return self._client

    @staticmethod
    def _build_messages(prompt: str, attachment: Attachment | None) -> list[dict[str, Any]]:
        if attachment is None:
            user_content: str | list[dict[str, Any]] = prompt
        else:
            user_content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": attachment.data_url}},
            ]
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ]

    async def complete(
        self,
        model_id: str,
        prompt: str,
        attachment: Attachment | None = None,
        *,
        timeout: float | None = None,
        temperature: float = 0.1,
    ) -> str:
        """
        Perform one model call and return the raw response text.

        Raises:
            ConfigurationError: If no credential is configured
            UpstreamError: On non-success status, connection failure or empty reply
        """
        client = self.client
        try:
            response = await client.chat.completions.create(
                model=model_id,
                messages=self._build_messages(prompt, attachment),
                temperature=temperature,
                response_format={"type": "json_object"},
                timeout=timeout,
            )
        except APIStatusError as e:
            raise UpstreamError(
                f"Model API error ({e.status_code}): {e.message}",
                status_code=e.status_code,
            ) from e
        except APIConnectionError as e:
            raise UpstreamError(f"Model API unreachable: {e}") from e

        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise UpstreamError("No text response from model API")
        return text

    async def invoke_model(
        self,
        model_id: str,
        prompt: str,
        schema: type[SchemaT],
        attachment: Attachment | None = None,
        *,
        timeout: float | None = None,
        temperature: float = 0.1,
    ) -> SchemaT:
        """
        Call the model once and validate its JSON reply against ``schema``.

        Args:
            model_id: Model identifier at the endpoint
            prompt: Instruction text
            schema: Pydantic model the response must match
            attachment: Optional document sent with the prompt
            timeout: Per-call timeout in seconds
            temperature: Sampling temperature

        Returns:
            Validated instance of ``schema``
        """
        text = await self.complete(
            model_id,
            prompt,
            attachment,
            timeout=timeout,
            temperature=temperature,
        )
        return parse_model_output(text, schema)
