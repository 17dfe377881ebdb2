"""
Exceptions

Error taxonomy shared by the review pipeline and its collaborators.
"""

from typing import Dict, Optional


class ReviewAgentError(Exception):
    """Base class for all review agent errors."""


class SetupError(ReviewAgentError):
    """Missing credentials or invalid configuration."""


class MalformedDiffError(ReviewAgentError):
    """Diff text cannot be split into file and hunk sections."""


class CompletionError(ReviewAgentError):
    """The completion call for a single file failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class MalformedResponseError(ReviewAgentError):
    """A completion response does not match the review payload shape."""


class SubmissionError(ReviewAgentError):
    """Submitting the final comment batch failed."""


class GitHubAPIError(ReviewAgentError):
    """GitHub API related errors"""

    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class NotFoundError(GitHubAPIError):
    """Requested repository or pull request does not exist."""


class RateLimitExceeded(GitHubAPIError):
    """GitHub API rate limit exceeded"""

    def __init__(self, reset_time):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}", status_code=429)
        self.reset_time = reset_time


class NetworkError(GitHubAPIError):
    """Transport level failure talking to GitHub."""
