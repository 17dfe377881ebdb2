"""
Review Response Parser

Decodes the model's JSON answer into candidate review comments.
Malformed or refused responses yield no comments instead of errors.
"""

import json
import logging
import re
from typing import List, Optional

from pydantic import ValidationError

from ..exceptions import MalformedResponseError
from ..models.review import CompletionResult, ReviewComment, ReviewEntry, ReviewPayload


logger = logging.getLogger(__name__)


class ResponseParser:
    """Turns completion results into ReviewComment candidates."""

    def __init__(self):
        self.fence_pattern = re.compile(r'^```[\w-]*\s*\n(.*?)\n?```\s*$', re.DOTALL)

    def parse(self, raw_completion: Optional[CompletionResult], path: str = "") -> List[ReviewComment]:
        """
        Parse a completion result.

        Args:
            raw_completion: Result of the completion call, or None if the
                call failed upstream
            path: File path, used only for log messages

        Returns:
            Candidate comments; empty for failed, malformed or empty responses
        """
        if raw_completion is None:
            return []

        refusal = raw_completion.choices[0].message.refusal
        if refusal:
            logger.warning(f"Model refused to review {path}: {refusal[:200]}")
            return []

        try:
            comments = self.decode(raw_completion.content)
        except MalformedResponseError as e:
            logger.warning(f"Ignoring malformed review response for {path}: {e}")
            return []

        logger.debug(f"Decoded {len(comments)} candidate comments for {path}")
        return comments

    def decode(self, content: Optional[str]) -> List[ReviewComment]:
        """
        Decode message text of the form {"reviews": [{lineNumber, reviewComment}]}.

        Raises:
            MalformedResponseError: If the text is empty, not JSON, or has no reviews list
        """
        if content is None or not content.strip():
            raise MalformedResponseError("empty response content")

        text = self._strip_fence(content.strip())

        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            raise MalformedResponseError(f"invalid JSON: {e}") from e

        try:
            payload = ReviewPayload.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(f"unexpected payload shape: {e.error_count()} errors") from e

        comments = []
        for entry in payload.reviews:
            if not isinstance(entry, dict):
                logger.debug(f"Skipping non-object review entry: {entry!r}")
                continue
            try:
                review = ReviewEntry.model_validate(entry)
            except ValidationError as e:
                logger.debug(f"Skipping invalid review entry: {e.error_count()} errors")
                continue
            comments.append(ReviewComment(line_number=review.lineNumber, body=review.reviewComment))

        return comments

    def _strip_fence(self, text: str) -> str:
        match = self.fence_pattern.match(text)
        return match.group(1).strip() if match else text
