"""
Schema-constrained chat completion over OpenAI or Anthropic

OpenAI receives the schema as a strict ``json_schema`` response format.
Anthropic receives it as the input schema of a tool the model is forced to call.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import anthropic
import openai

from processors.image_encoder import EncodedImage
from schemas import OutputSchema
from utils.config import LLMConfig
from utils.errors import InferenceFailed, MissingCredential
from utils.logger import logger


# A message is an ordered list of parts: text or an encoded image
MessagePart = Union[str, EncodedImage]
Message = List[MessagePart]

API_KEY_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


@dataclass
class StructuredResponse:
    """Raw structured payload returned by the backend"""
    payload: Union[str, Dict[str, Any], None]
    truncated: bool = False


class StructuredLLMClient:
    """Send role-tagged messages with an output schema to the configured provider"""

    def __init__(self, config: LLMConfig, sdk_client: Any = None):
        """
        Initialize the client

        Args:
            config: LLM configuration (provider, keys, models, timeouts)
            sdk_client: Prebuilt provider SDK client, mainly for tests
        """
        self.config = config
        self.provider = config.provider
        self._sdk_client = sdk_client

    @property
    def api_key(self) -> Optional[str]:
        if self.provider == "anthropic":
            return self.config.anthropic_api_key
        return self.config.openai_api_key

    def require_credential(self):
        """Raise MissingCredential unless an API key is configured"""
        if self._sdk_client is None and not self.api_key:
            raise MissingCredential(self.provider, API_KEY_ENV_VARS[self.provider])

    def _client(self):
        if self._sdk_client is None:
            self.require_credential()
            if self.provider == "anthropic":
                self._sdk_client = anthropic.Anthropic(
                    api_key=self.api_key,
                    timeout=self.config.request_timeout,
                    max_retries=self.config.max_retries
                )
            else:
                self._sdk_client = openai.OpenAI(
                    api_key=self.api_key,
                    timeout=self.config.request_timeout,
                    max_retries=self.config.max_retries
                )
            logger.debug(f"Created {self.provider} client for model {self.config.model}")
        return self._sdk_client

    def complete(
        self,
        messages: List[Message],
        schema: OutputSchema,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> StructuredResponse:
        """
        Run one schema-constrained completion

        Args:
            messages: User messages, each an ordered list of text/image parts
            schema: Output contract the response must conform to
            max_tokens: Output token bound (defaults to config.max_tokens)
            timeout: Request deadline in seconds (defaults to config.request_timeout)

        Returns:
            Unvalidated payload plus a truncation flag

        Raises:
            MissingCredential: No API key for the provider
            InferenceFailed: Transport or backend error, refusal or empty response
        """
        client = self._client()
        max_tokens = max_tokens or self.config.max_tokens
        timeout = timeout if timeout is not None else self.config.request_timeout

        if self.provider == "anthropic":
            return self._call_claude(client, messages, schema, max_tokens, timeout)
        return self._call_openai(client, messages, schema, max_tokens, timeout)

    def _call_openai(self, client, messages: List[Message], schema: OutputSchema,
                     max_tokens: int, timeout: float) -> StructuredResponse:
        """Call OpenAI chat completions with a json_schema response format"""
        completion_params = {
            "model": self.config.openai_model,
            "messages": [
                {"role": "user", "content": self._openai_content(message)}
                for message in messages
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": schema.name,
                    "description": schema.description,
                    "schema": schema.json_schema,
                    "strict": True
                }
            },
            "timeout": timeout
        }

        # GPT-5 has different parameter requirements
        if "gpt-5" in self.config.openai_model.lower():
            completion_params["max_completion_tokens"] = max_tokens
        else:
            completion_params["max_tokens"] = max_tokens
            completion_params["temperature"] = self.config.temperature

        try:
            response = client.chat.completions.create(**completion_params)
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API call failed: {e}")
            raise InferenceFailed(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise InferenceFailed("OpenAI returned no choices")

        choice = response.choices[0]
        if getattr(choice.message, "refusal", None):
            raise InferenceFailed(f"Model refused the request: {choice.message.refusal}")

        if choice.message.content is None:
            raise InferenceFailed(f"OpenAI returned an empty message (finish_reason={choice.finish_reason})")

        return StructuredResponse(
            payload=choice.message.content,
            truncated=choice.finish_reason == "length"
        )

    def _call_claude(self, client, messages: List[Message], schema: OutputSchema,
                     max_tokens: int, timeout: float) -> StructuredResponse:
        """Call Claude messages with a forced tool call carrying the schema"""
        content = []
        for message in messages:
            content.extend(self._claude_content(message))

        try:
            response = client.messages.create(
                model=self.config.claude_model,
                max_tokens=max_tokens,
                temperature=self.config.temperature,
                messages=[{"role": "user", "content": content}],
                tools=[{
                    "name": schema.name,
                    "description": schema.description,
                    "input_schema": schema.json_schema
                }],
                tool_choice={"type": "tool", "name": schema.name},
                timeout=timeout
            )
        except anthropic.AnthropicError as e:
            logger.error(f"Claude API call failed: {e}")
            raise InferenceFailed(f"Anthropic request failed: {e}") from e

        payload = None
        for block in response.content:
            if block.type == "tool_use" and block.name == schema.name:
                payload = block.input
                break

        if payload is None:
            raise InferenceFailed(f"Claude returned no '{schema.name}' tool call (stop_reason={response.stop_reason})")

        return StructuredResponse(
            payload=payload,
            truncated=response.stop_reason == "max_tokens"
        )

    @staticmethod
    def _openai_content(message: Message) -> Union[str, List[Dict[str, Any]]]:
        if len(message) == 1 and isinstance(message[0], str):
            return message[0]

        parts = []
        for part in message:
            if isinstance(part, EncodedImage):
                parts.append({"type": "image_url", "image_url": {"url": part.data_url}})
            else:
                parts.append({"type": "text", "text": part})
        return parts

    @staticmethod
    def _claude_content(message: Message) -> List[Dict[str, Any]]:
        parts = []
        for part in message:
            if isinstance(part, EncodedImage):
                parts.append({
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": part.media_type,
                        "data": part.data
                    }
                })
            else:
                parts.append({"type": "text", "text": part})
        return parts
