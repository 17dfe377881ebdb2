"""
Completion Client

Wraps the OpenAI chat completions API behind a small interface and
validates the returned payload before the pipeline touches it.
"""

import logging
from typing import Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from ..config import DEFAULT_MODEL
from ..exceptions import CompletionError
from ..models.review import CompletionResult, ReviewRequest


logger = logging.getLogger(__name__)


class CompletionClient:
    """
    Sends review prompts to a chat completion model.

    The prompt is sent as a single system message; the raw SDK response
    is converted into a validated CompletionResult.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: Optional[str] = None,
        temperature: float = 0.2,
        timeout: float = 120,
        client: Optional[OpenAI] = None,
    ):
        """
        Initialize completion client.

        Args:
            api_key: Completion API key
            model: Model identifier
            base_url: Optional API base URL for compatible endpoints
            temperature: Sampling temperature
            timeout: Request timeout in seconds
            client: Preconfigured OpenAI client (mainly for tests)
        """
        self.model = model
        self.temperature = temperature
        self._client = client or OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=2)

    def complete(self, request: ReviewRequest) -> CompletionResult:
        """
        Run one completion for a review request.

        Args:
            request: Prompt for a single file

        Returns:
            Validated CompletionResult with at least one choice

        Raises:
            CompletionError: If the API call fails or returns no usable choices
        """
        logger.debug(f"Requesting completion for {request.path} (model={self.model})")

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{'role': 'system', 'content': request.prompt}],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise CompletionError(f"Completion request failed for {request.path}: {e}", path=request.path) from e

        payload = response.model_dump() if hasattr(response, 'model_dump') else response

        try:
            result = CompletionResult.model_validate(payload)
        except ValidationError as e:
            raise CompletionError(
                f"Completion response for {request.path} has no usable choices: {e.error_count()} errors",
                path=request.path,
            ) from e

        finish_reason = result.choices[0].finish_reason
        if finish_reason and finish_reason != 'stop':
            logger.warning(f"Completion for {request.path} finished with reason '{finish_reason}'")

        return result
