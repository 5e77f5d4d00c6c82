"""OpenAI Chat Completions client that turns source text into replacement text.

One stateless request per call: the prompt is the instruction followed by the
verbatim source text, and the reply's first choice is returned trimmed. The
output cap is derived from a coarse 4-characters-per-token estimate of the
input against a fixed total budget.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from aipolish.core.config import DEFAULT_INSTRUCTION, DEFAULTS

log = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
TOTAL_TOKEN_BUDGET = 8192
MAX_OUTPUT_TOKENS = 1000
DEFAULT_MODEL = "gpt-4"
DEFAULT_TEMPERATURE = 0.7

_PROMPT = (
    "Please process the following code and {instruction}. "
    "Return the full code, without adding conversational notes:"
)


class CompletionError(Exception):
    """Base error for completion requests."""


class MissingCredentialError(CompletionError):
    """No API key was supplied."""


class PromptTooLargeError(CompletionError):
    """Input leaves no room for output within the token budget."""


class TransportError(CompletionError):
    """The HTTP call failed: connection, timeout, or non-2xx status."""

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code


class MalformedResponse(CompletionError):
    """The endpoint answered but the body lacks choices[0].message."""


def estimate_input_tokens(text: str) -> int:
    """Approximate token count: one token per 4 characters, rounded up."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def max_output_tokens(
    text: str,
    budget: int = TOTAL_TOKEN_BUDGET,
    cap: int = MAX_OUTPUT_TOKENS,
) -> int:
    """Output cap for a given input: min(cap, budget - estimated input tokens).

    Not clamped; a large enough input yields zero or a negative number.
    """
    return min(cap, budget - estimate_input_tokens(text))


def build_prompt(instruction: str, text: str) -> str:
    """Wrap the instruction and append the source text after a blank line."""
    instruction = instruction.strip().rstrip(".") or DEFAULT_INSTRUCTION
    return f"{_PROMPT.format(instruction=instruction)}\n\n{text}"


@dataclass
class CompletionRequest:
    """A single chat-completion request."""

    model: str
    instruction: str
    source_text: str
    max_tokens: int
    temperature: float = DEFAULT_TEMPERATURE

    def to_payload(self) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "user", "content": build_prompt(self.instruction, self.source_text)},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }


def extract_content(data: object) -> str:
    """Return the trimmed content of the first choice.

    Raises:
        MalformedResponse: If choices[0].message (or its content) is missing.
    """
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices:
        raise MalformedResponse("Invalid response structure from AI API: no choices")

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise MalformedResponse("Invalid response structure from AI API: no message")

    content = message.get("content")
    if not isinstance(content, str):
        raise MalformedResponse("Invalid response structure from AI API: no content")
    return content.strip()


class OpenAICompletionClient:
    """Wrapper around the OpenAI Chat Completions API (/v1/chat/completions).

    Sends one file's text per call and returns the model's replacement.
    Nothing is retried; errors surface as TransportError or MalformedResponse.
    """

    def __init__(self, config: dict | None = None) -> None:
        config = config or {}
        defaults = DEFAULTS["openai"]
        self._api_key = config.get("api_key") or ""
        self._model = config.get("model") or DEFAULT_MODEL
        self._base_url = (config.get("base_url") or defaults["base_url"]).rstrip("/")
        temperature = config.get("temperature")
        self._temperature = float(DEFAULT_TEMPERATURE if temperature is None else temperature)
        self._max_output_tokens = int(config.get("max_output_tokens") or MAX_OUTPUT_TOKENS)
        self._token_budget = int(config.get("token_budget") or TOTAL_TOKEN_BUDGET)
        self._timeout = config.get("timeout", defaults["timeout"])

    @property
    def model(self) -> str:
        return self._model

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/v1/chat/completions"

    def build_request(
        self, source_text: str, instruction: str | None = None
    ) -> CompletionRequest:
        """Build the request for source_text, rejecting inputs with no output room."""
        max_tokens = max_output_tokens(
            source_text, budget=self._token_budget, cap=self._max_output_tokens,
        )
        if max_tokens < 1:
            raise PromptTooLargeError(
                f"Input of ~{estimate_input_tokens(source_text)} tokens leaves no room "
                f"for output within the {self._token_budget}-token budget"
            )
        return CompletionRequest(
            model=self._model,
            instruction=instruction or DEFAULT_INSTRUCTION,
            source_text=source_text,
            max_tokens=max_tokens,
            temperature=self._temperature,
        )

    def complete(self, source_text: str, instruction: str | None = None) -> str:
        """Send source_text with instruction and return the replacement text.

        Args:
            source_text: Full text to transform; sent verbatim.
            instruction: What to do with it. Defaults to "improve readability".

        Returns:
            Trimmed content of the first choice. May be empty.

        Raises:
            MissingCredentialError: No API key configured.
            PromptTooLargeError: Input exhausts the token budget.
            TransportError: Connection failure, timeout, or HTTP error status.
            MalformedResponse: Response body lacks choices[0].message.
        """
        if not self._api_key:
            raise MissingCredentialError("No API key provided.")

        request = self.build_request(source_text, instruction)

        import httpx

        log.debug(
            "POST %s model=%s max_tokens=%d input_chars=%d",
            self.endpoint, request.model, request.max_tokens, len(source_text),
        )
        try:
            resp = httpx.post(
                self.endpoint,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                json=request.to_payload(),
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                str(e), cause=e, status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, OSError) as e:
            raise TransportError(str(e), cause=e) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponse(f"Invalid response structure from AI API: {e}") from e

        return extract_content(data)


def complete(
    source_text: str,
    credential: str,
    instruction: str = DEFAULT_INSTRUCTION,
    config: dict | None = None,
) -> str:
    """Transform source_text with one chat-completion call.

    Convenience wrapper around OpenAICompletionClient; ``config`` takes the
    keys of the ``openai`` config section.
    """
    client_cfg = dict(config or {})
    client_cfg["api_key"] = credential
    return OpenAICompletionClient(client_cfg).complete(source_text, instruction)
